import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.utils.exceptions import NotFoundError
from .models import PaymentMethod

logger = logging.getLogger(__name__)


class PaymentMethodService:
    """
    Saved payment methods. At most one default per user.
    """

    @staticmethod
    def list_for_user(user):
        return PaymentMethod.objects.filter(user=user).order_by("-is_default", "-created_at")

    @staticmethod
    def get_method(method_id, user=None) -> PaymentMethod:
        qs = PaymentMethod.objects.all()
        if user is not None:
            qs = qs.filter(user=user)
        try:
            return qs.get(pk=method_id)
        except (PaymentMethod.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Payment method not found")

    @staticmethod
    def _clear_default(user, keep_id=None):
        qs = PaymentMethod.objects.select_for_update().filter(user=user, is_default=True)
        if keep_id is not None:
            qs = qs.exclude(pk=keep_id)
        qs.update(is_default=False)

    @staticmethod
    @transaction.atomic
    def create_method(user, **data) -> PaymentMethod:
        if data.get("is_default"):
            PaymentMethodService._clear_default(user)

        method = PaymentMethod.objects.create(user=user, **data)
        logger.info(f"Payment method {method.id} added for user {user.id}", extra={"user_id": str(user.id)})
        return method

    @staticmethod
    @transaction.atomic
    def update_method(method, **data) -> PaymentMethod:
        if data.get("is_default"):
            PaymentMethodService._clear_default(method.user, keep_id=method.pk)

        for field, value in data.items():
            setattr(method, field, value)
        method.save(update_fields=list(data.keys()) + ["updated_at"])
        return method

    @staticmethod
    def delete_method(method):
        method_id = method.pk
        method.delete()
        logger.info(f"Payment method {method_id} deleted", extra={"user_id": str(method.user_id)})
