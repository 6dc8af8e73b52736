from django.contrib.admin import AdminSite

# Accounts first, then the relationships between them
APP_ORDER = ('users', 'connections')


class AbbeyAdminSite(AdminSite):
    site_header = 'Abbey Administration'
    site_title = 'Abbey Admin'
    index_title = 'Users and connections'

    def get_app_list(self, request, app_label=None):
        app_list = super().get_app_list(request, app_label)
        return sorted(
            app_list,
            key=lambda app: APP_ORDER.index(app['app_label']) if app['app_label'] in APP_ORDER else len(APP_ORDER),
        )


abbey_admin_site = AbbeyAdminSite(name='abbey_admin')
