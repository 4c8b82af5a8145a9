from django.contrib import admin

from gala_voting.voting import models


class ReadOnlyAdminMixin:
    """Browse only: writes go through the REST API so they are audited and broadcast."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class NomineeInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = models.Nominee
    extra = 0
    fields = ["name", "description", "photo", "display_order", "is_active"]


@admin.register(models.Category)
class CategoryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["id", "title", "is_award", "display_order", "is_active"]
    list_filter = ["is_award", "is_active"]
    search_fields = ["id", "title"]
    inlines = [NomineeInline]


@admin.register(models.Vote)
class VoteAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["session_id", "category", "nominee", "created_at", "updated_at"]
    list_filter = ["category"]
    search_fields = ["session_id"]


@admin.register(models.SystemSetting)
class SystemSettingAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["key", "value", "updated_at"]
