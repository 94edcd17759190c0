from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import PaymentMethod

User = get_user_model()


class PaymentMethodAPITests(APITestCase):
    def setUp(self):
        self.url = reverse("payment-methods")
        self.user = User.objects.create_user(email="pay@example.com", name="Payer", password="secret123")
        self.other = User.objects.create_user(email="other@example.com", name="Other", password="secret123")
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="ADMIN"
        )
        self.year = timezone.now().year + 2

    def _card(self, **overrides):
        body = {
            "type": "CREDIT_CARD",
            "provider": "Visa",
            "card_number": "4242 4242 4242 4242",
            "expiry_month": 12,
            "expiry_year": self.year,
            "holder_name": "Pat Payer",
        }
        body.update(overrides)
        return body

    def test_card_number_is_stored_masked(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(self.url, self._card(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["card_number"], "**** **** **** 4242")
        self.assertEqual(PaymentMethod.objects.get().card_number, "**** **** **** 4242")

    def test_invalid_expiry_rejected(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            self.url,
            self._card(expiry_month=13, expiry_year=timezone.now().year - 1),
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("expiry_month", resp.data["errors"])
        self.assertIn("expiry_year", resp.data["errors"])

    def test_only_one_default_per_user(self):
        self.client.force_authenticate(self.user)
        first = self.client.post(self.url, self._card(is_default=True), format="json")
        self.client.post(self.url, self._card(provider="Mastercard", is_default=True), format="json")

        defaults = PaymentMethod.objects.filter(user=self.user, is_default=True)
        self.assertEqual(defaults.count(), 1)
        self.assertEqual(defaults.get().provider, "Mastercard")

        # Flip it back through an update
        resp = self.client.put(self.url, {"id": first.data["data"]["id"], "is_default": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(PaymentMethod.objects.get(user=self.user, is_default=True).provider, "Visa")

    def test_list_puts_default_first(self):
        PaymentMethod.objects.create(user=self.user, type="E_WALLET", provider="PayPal")
        PaymentMethod.objects.create(user=self.user, type="DEBIT_CARD", provider="Maestro", is_default=True)
        PaymentMethod.objects.create(user=self.other, type="E_WALLET", provider="Wallet")

        self.client.force_authenticate(self.user)
        resp = self.client.get(self.url)

        self.assertEqual([m["provider"] for m in resp.data["data"]], ["Maestro", "PayPal"])

    def test_update_requires_id_and_fields(self):
        method = PaymentMethod.objects.create(user=self.user, type="E_WALLET", provider="PayPal")
        self.client.force_authenticate(self.user)

        resp = self.client.put(self.url, {"provider": "X"}, format="json")
        self.assertEqual(resp.data["message"], "Payment method ID is required")

        resp = self.client.put(self.url, {"id": str(method.id)}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "No fields to update")

    def test_cannot_touch_someone_elses_method(self):
        method = PaymentMethod.objects.create(user=self.other, type="E_WALLET", provider="Wallet")
        self.client.force_authenticate(self.user)

        resp = self.client.delete(f"{self.url}?id={method.id}")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.get(self.url, {"userId": str(self.other.id)})
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_can_list_for_user(self):
        PaymentMethod.objects.create(user=self.other, type="E_WALLET", provider="Wallet")
        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url, {"userId": str(self.other.id)})
        self.assertEqual(len(resp.data["data"]), 1)

    def test_delete(self):
        method = PaymentMethod.objects.create(user=self.user, type="E_WALLET", provider="PayPal")
        self.client.force_authenticate(self.user)

        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_400_BAD_REQUEST)
        resp = self.client.delete(f"{self.url}?id={method.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(PaymentMethod.objects.exists())
