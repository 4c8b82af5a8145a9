from django.contrib import admin

from gala_voting.audit import models


@admin.register(models.AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = ["id", "action", "actor", "table_name", "record_id", "created_at"]
    search_fields = ["action", "table_name", "record_id", "ip_address"]
    list_filter = ["action", "created_at"]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
