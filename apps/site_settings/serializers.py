from rest_framework import serializers

from .models import SiteSetting


class SiteSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteSetting
        fields = ["setting_key", "setting_value", "description", "created_at", "updated_at"]
        read_only_fields = fields


class SiteSettingUpdateSerializer(serializers.Serializer):
    setting_key = serializers.CharField(min_length=1, max_length=100)
    setting_value = serializers.CharField(allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
