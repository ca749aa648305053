from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["created_at", "user", "type", "read", "related_type", "related_id"]
    list_filter = ["type", "read"]
    search_fields = ["message"]
