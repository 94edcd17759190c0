# apps/analytics/admin.py
from django.contrib import admin

from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("action", "user", "created_at")
    list_filter = ("action",)
    search_fields = ("details", "user__email")
    readonly_fields = ("user", "action", "details", "created_at")

    def has_add_permission(self, request):
        return False
