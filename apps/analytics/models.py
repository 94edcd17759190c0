# apps/analytics/models.py
import uuid

from django.conf import settings
from django.db import models


class ActivityLog(models.Model):
    """
    Append-only audit trail shown on the admin dashboard
    (registrations, order placement, status changes...).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="activity_logs",
    )
    action = models.CharField(max_length=50, db_index=True)
    details = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "activity_logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action} by {self.user_id}"
