from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Order, OrderItem

User = get_user_model()


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(error_messages={"invalid": "Invalid product ID"})
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={"min_value": "Quantity must be at least 1"},
    )
    price_per_unit = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        error_messages={"min_value": "Price per unit must be non-negative"},
    )


class OrderCreateSerializer(serializers.Serializer):
    """
    Checkout payload. Validated completely before any row is touched.
    """
    user_id = serializers.UUIDField(required=False, error_messages={"invalid": "Invalid user ID"})
    total_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        error_messages={"min_value": "Total amount must be non-negative"},
    )
    shipping_address = serializers.CharField(error_messages={"blank": "Shipping address is required"})
    phone = serializers.CharField(max_length=50, error_messages={"blank": "Phone number is required"})
    payment_method = serializers.CharField(max_length=50, error_messages={"blank": "Payment method is required"})
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderLineInputSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": "Order must have at least one item"},
    )

    def validate_user_id(self, value):
        if not User.objects.filter(pk=value).exists():
            raise serializers.ValidationError("User not found")
        return value

    def validate_notes(self, value):
        return value or None


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class OrderUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices, required=False)
    shipping_address = serializers.CharField(required=False, allow_blank=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No fields to update")
        return attrs


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_image = serializers.CharField(source="product.image_url", read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "order_id", "product_id", "quantity", "price_per_unit", "product_name", "product_image"]


class OrderItemDetailSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_description = serializers.CharField(source="product.description", read_only=True, allow_null=True)
    product_image_url = serializers.CharField(source="product.image_url", read_only=True, allow_null=True)
    product_current_price = serializers.DecimalField(
        source="product.price", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "order_id",
            "product_id",
            "quantity",
            "price_per_unit",
            "product_name",
            "product_description",
            "product_image_url",
            "product_current_price",
        ]


class MinimalOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "order_id", "product_id", "quantity", "price_per_unit"]


ORDER_FIELDS = [
    "id",
    "user_id",
    "total_amount",
    "status",
    "shipping_address",
    "phone",
    "payment_method",
    "notes",
    "created_at",
    "updated_at",
]


class MinimalOrderSerializer(serializers.ModelSerializer):
    """
    Order header without joined display fields; used when enrichment fails.
    """

    class Meta:
        model = Order
        fields = ORDER_FIELDS


class OrderSerializer(serializers.ModelSerializer):
    """
    List/checkout representation: header + customer name/email + items.
    """
    customer_name = serializers.CharField(source="user.name", read_only=True)
    customer_email = serializers.CharField(source="user.email", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ORDER_FIELDS + ["customer_name", "customer_email", "items"]


class OrderDetailSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    items = OrderItemDetailSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = ORDER_FIELDS + ["user", "items"]

    def get_user(self, obj):
        return {
            "name": obj.user.name,
            "email": obj.user.email,
            "role": obj.user.role,
            "avatar_url": obj.user.avatar_url,
        }
