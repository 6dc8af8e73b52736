from django.contrib import admin
from abbey.admin import abbey_admin_site
from .models import Connection


@admin.register(Connection, site=abbey_admin_site)
class ConnectionAdmin(admin.ModelAdmin):
    list_display = ('user', 'friend', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('user__email', 'friend__email')
    raw_id_fields = ('user', 'friend')
