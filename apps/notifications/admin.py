# apps/notifications/admin.py
from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = (
        "user",
        "type",
        "title",
        "is_read",
        "created_at",
    )
    list_filter = ("type", "is_read")
    search_fields = ("title", "message", "user__email")
    readonly_fields = ("read_at", "created_at", "updated_at")
