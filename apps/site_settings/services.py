import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from .models import SiteSetting
from .serializers import SiteSettingSerializer

logger = logging.getLogger(__name__)


class SiteSettingsService:
    """
    Read-mostly configuration. Readers get a cached snapshot that is
    rebuilt lazily after a write invalidates it.
    """
    CACHE_KEY = "site_settings:snapshot"

    @classmethod
    def _ttl(cls):
        return getattr(settings, "SITE_SETTINGS_CACHE_TTL", 300)

    @classmethod
    def snapshot(cls):
        """
        List of {setting_key, setting_value, description, ...} ordered by key.
        """
        data = cache.get(cls.CACHE_KEY)
        if data is None:
            data = SiteSettingSerializer(SiteSetting.objects.order_by("setting_key"), many=True).data
            data = [dict(row) for row in data]
            cache.set(cls.CACHE_KEY, data, timeout=cls._ttl())
        return data

    @classmethod
    def get(cls, key, default=None):
        for row in cls.snapshot():
            if row["setting_key"] == key:
                return row["setting_value"]
        return default

    @classmethod
    def invalidate(cls):
        cache.delete(cls.CACHE_KEY)

    @classmethod
    def upsert(cls, setting_key, setting_value, description=None) -> SiteSetting:
        with transaction.atomic():
            setting, created = SiteSetting.objects.update_or_create(
                setting_key=setting_key,
                defaults={"setting_value": setting_value, "description": description or None},
            )
        # Again after commit: a reader racing the write may have re-cached the old rows
        cls.invalidate()
        transaction.on_commit(cls.invalidate)
        logger.info(f"Setting '{setting_key}' {'created' if created else 'updated'}")
        return setting
