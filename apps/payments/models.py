from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel


class PaymentMethodType(models.TextChoices):
    CREDIT_CARD = "CREDIT_CARD", "Credit Card"
    DEBIT_CARD = "DEBIT_CARD", "Debit Card"
    E_WALLET = "E_WALLET", "E-Wallet"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank Transfer"


class PaymentMethod(TimestampedModel):
    """
    Saved payment instrument. Only masked card numbers are ever stored.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payment_methods")
    type = models.CharField(max_length=20, choices=PaymentMethodType.choices)
    provider = models.CharField(max_length=50)

    card_number = models.CharField(max_length=32, blank=True, null=True, help_text="Masked, last 4 digits only")
    expiry_month = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)],
    )
    expiry_year = models.PositiveSmallIntegerField(blank=True, null=True)
    holder_name = models.CharField(max_length=100, blank=True, null=True)
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "payment_methods"
        ordering = ["-is_default", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(is_default=True),
                name="one_default_payment_method_per_user",
            ),
        ]

    def __str__(self):
        return f"{self.provider} ({self.type}) - {self.user_id}"
