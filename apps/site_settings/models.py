from django.db import models


class SiteSetting(models.Model):
    """
    Key/value store editable from the dashboard (site name, currency, ...).
    """
    setting_key = models.CharField(max_length=100, primary_key=True)
    setting_value = models.TextField(blank=True, default="")
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "settings"
        ordering = ["setting_key"]

    def __str__(self):
        return f"{self.setting_key}={self.setting_value}"
