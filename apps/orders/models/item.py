import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.models import Product
from .order import Order

__all__ = ["OrderItem"]


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    # Snapshot at order time (critical for audit); never refreshed from the product
    price_per_unit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        db_table = "order_items"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='order_item_quantity_positive'
            ),
            models.CheckConstraint(
                condition=models.Q(price_per_unit__gte=0),
                name='order_item_price_non_negative'
            ),
        ]

    @property
    def subtotal(self):
        return self.price_per_unit * self.quantity

    def __str__(self):
        return f"{self.quantity}x {self.product_id}"
