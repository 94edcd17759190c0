from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import MediaFile

User = get_user_model()


class MediaAPITests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="m@example.com", name="Mia", password="secret123")
        self.other = User.objects.create_user(email="x@example.com", name="Xan", password="secret123")
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="ADMIN"
        )
        self.body = {
            "file_name": "banner.png",
            "file_url": "https://cdn.example.com/banner.png",
            "file_type": "image/png",
            "file_size_kb": 120,
        }

    def test_register_defaults_uploader_to_caller(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(reverse("media-list"), self.body, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["uploaded_by"]["email"], "m@example.com")
        self.assertEqual(MediaFile.objects.get().uploaded_by, self.user)

    def test_only_admin_registers_for_someone_else(self):
        body = dict(self.body, uploaded_by_user_id=str(self.other.id))

        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.post(reverse("media-list"), body, format="json").status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.post(reverse("media-list"), body, format="json")
        self.assertEqual(resp.data["data"]["uploaded_by"]["name"], "Xan")

    def test_validation(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            reverse("media-list"),
            dict(self.body, file_url="not a url", file_size_kb=-5),
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("file_url", resp.data["errors"])
        self.assertIn("file_size_kb", resp.data["errors"])

    def test_list_search_and_default_page_size(self):
        for i in range(25):
            MediaFile.objects.create(
                file_name=f"doc-{i}.pdf", file_url=f"https://cdn.example.com/{i}.pdf",
                file_type="application/pdf", file_size_kb=i, uploaded_by=self.user,
            )
        MediaFile.objects.create(
            file_name="logo.svg", file_url="https://cdn.example.com/logo.svg",
            file_type="image/svg+xml", file_size_kb=3, uploaded_by=self.user,
        )
        self.client.force_authenticate(self.user)

        resp = self.client.get(reverse("media-list"))
        self.assertEqual(resp.data["pagination"]["limit"], 20)
        self.assertEqual(resp.data["pagination"]["total"], 26)
        self.assertEqual(len(resp.data["data"]), 20)

        resp = self.client.get(reverse("media-list"), {"search": "image"})
        self.assertEqual(resp.data["pagination"]["total"], 1)

    def test_retrieve_missing(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("media-detail", args=["00000000-0000-4000-8000-000000000000"]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["message"], "Media file not found")

    def test_delete_own_file_only(self):
        media = MediaFile.objects.create(uploaded_by=self.other, **self.body)

        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.delete(reverse("media-detail", args=[media.id])).status_code, 403)

        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.delete(reverse("media-detail", args=[media.id])).status_code, 200)
        self.assertFalse(MediaFile.objects.exists())
