from django.contrib import admin

from .models import SiteSetting
from .services import SiteSettingsService


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ("setting_key", "setting_value", "updated_at")
    search_fields = ("setting_key", "description")

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        SiteSettingsService.invalidate()

    def delete_model(self, request, obj):
        super().delete_model(request, obj)
        SiteSettingsService.invalidate()
