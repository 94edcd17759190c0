from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel

__all__ = ["Order"]


class Order(TimestampedModel):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PAID = "PAID", "Paid"
        SHIPPED = "SHIPPED", "Shipped"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    # PROTECT: a user with orders cannot be deleted out from under the ledger
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')

    # Stored exactly as submitted by the client, never recomputed from items
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)

    shipping_address = models.TextField()
    phone = models.CharField(max_length=50)
    payment_method = models.CharField(max_length=50)
    notes = models.TextField(blank=True, null=True)

    # Client supplied Idempotency-Key, scoped per user
    idempotency_key = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name='order_total_non_negative'
            ),
            models.UniqueConstraint(
                fields=["user", "idempotency_key"],
                name="unique_order_idempotency_key_per_user",
            ),
        ]

    def __str__(self):
        return f"{self.id} [{self.status}]"
