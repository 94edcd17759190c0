# apps/notifications/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.utils.models import TimestampedModel


class NotificationType(models.TextChoices):
    ORDER = "ORDER", "Order"
    USER = "USER", "User"
    INVENTORY = "INVENTORY", "Inventory"


class Notification(TimestampedModel):
    """
    Single notification instance (inbox row).

    - user=None means a broadcast shown to everyone.
    - Created by admins through the API.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    type = models.CharField(max_length=20, choices=NotificationType.choices, db_index=True)
    title = models.CharField(max_length=255)
    message = models.TextField()
    link = models.CharField(max_length=500, blank=True, null=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read", "created_at"], name="notif_user_read_created_idx"),
        ]

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read", "read_at", "updated_at"])

    def __str__(self):
        return f"{self.user_id or 'broadcast'} [{self.type}] {self.title}"
