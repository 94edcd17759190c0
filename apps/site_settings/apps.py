from django.apps import AppConfig


class SiteSettingsConfig(AppConfig):
    name = "apps.site_settings"
