from django.contrib import admin
from abbey.admin import abbey_admin_site
from .models import User


@admin.register(User, site=abbey_admin_site)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'oauth_provider', 'created_at', 'is_staff')
    search_fields = ('email', 'name')
    list_filter = ('oauth_provider', 'is_active', 'is_staff', 'created_at')
    readonly_fields = ('oauth_provider', 'oauth_id', 'created_at', 'last_login')
    exclude = ('password', 'groups', 'user_permissions')
