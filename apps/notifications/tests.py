# apps/notifications/tests.py
from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Notification, NotificationType

User = get_user_model()


class NotificationAPITests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="n@example.com", name="Nina", password="secret123")
        self.other = User.objects.create_user(email="o@example.com", name="Omar", password="secret123")
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="ADMIN"
        )
        self.own = Notification.objects.create(
            user=self.user, type=NotificationType.ORDER, title="Order shipped", message="On its way"
        )
        self.broadcast = Notification.objects.create(
            type=NotificationType.INVENTORY, title="Maintenance", message="Tonight"
        )
        self.foreign = Notification.objects.create(
            user=self.other, type=NotificationType.USER, title="Hi Omar", message="Welcome"
        )

    def test_feed_contains_own_and_broadcast(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("notification-list"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        ids = {n["id"] for n in resp.data["data"]}
        self.assertEqual(ids, {str(self.own.id), str(self.broadcast.id)})

    @override_settings(NOTIFICATION_FEED_LIMIT=1)
    def test_feed_is_limited(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("notification-list"))
        self.assertEqual(len(resp.data["data"]), 1)

    def test_requires_authentication(self):
        resp = self.client.get(reverse("notification-list"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_only_admin_can_create(self):
        body = {"type": "ORDER", "title": "Sale", "message": "50% off", "userId": str(self.user.id)}

        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.post(reverse("notification-list"), body, format="json").status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.post(reverse("notification-list"), body, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(Notification.objects.filter(title="Sale", user=self.user).exists())

    def test_mark_read(self):
        self.client.force_authenticate(self.user)
        resp = self.client.put(reverse("notification-mark-read", args=[self.own.id]))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.own.refresh_from_db()
        self.assertTrue(self.own.is_read)
        self.assertIsNotNone(self.own.read_at)

    def test_cannot_mark_someone_elses_notification(self):
        self.client.force_authenticate(self.user)
        resp = self.client.put(reverse("notification-mark-read", args=[self.foreign.id]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        self.client.force_authenticate(self.user)
        resp = self.client.put(reverse("notification-mark-all-read"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["updated"], 2)
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)
