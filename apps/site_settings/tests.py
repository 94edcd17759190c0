from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import SiteSetting
from .services import SiteSettingsService

User = get_user_model()


class SiteSettingsTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.url = reverse("site-settings")
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="SUPER_ADMIN"
        )
        self.customer = User.objects.create_user(email="c@example.com", name="Cleo", password="secret123")
        SiteSetting.objects.create(setting_key="site_name", setting_value="Storedash")
        SiteSetting.objects.create(setting_key="currency", setting_value="USD")

    def test_list_ordered_by_key(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([s["setting_key"] for s in resp.data["data"]], ["currency", "site_name"])

    def test_put_upserts(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.put(self.url, {"setting_key": "currency", "setting_value": "EUR"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Setting updated successfully")
        self.assertEqual(SiteSetting.objects.get(pk="currency").setting_value, "EUR")

        self.client.put(
            self.url,
            {"setting_key": "theme", "setting_value": "dark", "description": "UI theme"},
            format="json",
        )
        self.assertEqual(SiteSetting.objects.count(), 3)

    def test_put_requires_admin_and_key(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.put(self.url, {"setting_key": "currency", "setting_value": "EUR"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        resp = self.client.put(self.url, {"setting_value": "EUR"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_snapshot_is_cached_and_invalidated_on_write(self):
        self.assertEqual(SiteSettingsService.get("currency"), "USD")

        # Direct writes bypass the service, so the cached value survives
        SiteSetting.objects.filter(pk="currency").update(setting_value="GBP")
        self.assertEqual(SiteSettingsService.get("currency"), "USD")

        SiteSettingsService.upsert("currency", "JPY")
        self.assertEqual(SiteSettingsService.get("currency"), "JPY")
        self.assertEqual(SiteSettingsService.get("missing", default="x"), "x")
