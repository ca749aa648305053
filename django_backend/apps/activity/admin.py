from django.contrib import admin

from .models import Activity


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ["created_at", "action", "target_type", "target_id", "user"]
    list_filter = ["action", "target_type"]
    readonly_fields = ["user", "action", "target_type", "target_id", "details", "metadata", "created_at"]

    def has_change_permission(self, request, obj=None):
        return False
