# apps/notifications/services.py
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.utils import timezone

from apps.utils.exceptions import NotFoundError
from .models import Notification

logger = logging.getLogger(__name__)


class NotificationService:

    @staticmethod
    def visible_to(user):
        # Own notifications plus broadcasts
        return Notification.objects.filter(Q(user=user) | Q(user__isnull=True))

    @staticmethod
    def feed(user):
        limit = getattr(settings, "NOTIFICATION_FEED_LIMIT", 50)
        return NotificationService.visible_to(user).order_by("-created_at")[:limit]

    @staticmethod
    def create(*, type, title, message, user=None, link=None) -> Notification:
        notification = Notification.objects.create(
            type=type,
            title=title,
            message=message,
            user=user,
            link=link or None,
        )
        logger.info(
            f"Notification {notification.id} created for {user.id if user else 'all users'}",
        )
        return notification

    @staticmethod
    def mark_read(user, notification_id) -> Notification:
        try:
            notification = NotificationService.visible_to(user).get(pk=notification_id)
        except (Notification.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Notification not found")
        notification.mark_read()
        return notification

    @staticmethod
    def mark_all_read(user) -> int:
        now = timezone.now()
        return NotificationService.visible_to(user).filter(is_read=False).update(
            is_read=True,
            read_at=now,
            updated_at=now,
        )
