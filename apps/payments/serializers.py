from rest_framework import serializers

from apps.utils.validators import mask_card_number, validate_card_number, validate_expiry_year
from .models import PaymentMethod, PaymentMethodType


class PaymentMethodSerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(choices=PaymentMethodType.choices)
    provider = serializers.CharField(min_length=1, max_length=50)
    card_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    expiry_month = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=12)
    expiry_year = serializers.IntegerField(required=False, allow_null=True, validators=[validate_expiry_year])
    holder_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    is_default = serializers.BooleanField(required=False)

    class Meta:
        model = PaymentMethod
        fields = [
            "id",
            "user_id",
            "type",
            "provider",
            "card_number",
            "expiry_month",
            "expiry_year",
            "holder_name",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "user_id", "created_at", "updated_at"]

    def validate_card_number(self, value):
        if not value:
            return None
        # [SECURITY] Full PAN never reaches the database
        return mask_card_number(validate_card_number(value))

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("No fields to update")
        if "holder_name" in attrs and not attrs["holder_name"]:
            attrs["holder_name"] = None
        return attrs
