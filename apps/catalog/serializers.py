# apps/catalog/serializers.py
from decimal import Decimal

from rest_framework import serializers
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    parent_id = serializers.PrimaryKeyRelatedField(
        source="parent",
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Category
        fields = ["id", "name", "description", "parent_id", "created_at", "updated_at"]

    def validate_parent_id(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A category cannot be its own parent.")
        return value


class ProductSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    stock_quantity = serializers.IntegerField(min_value=0)
    image_url = serializers.URLField(required=False, allow_blank=True, allow_null=True, max_length=500)
    category_id = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock_quantity",
            "image_url",
            "category_id",
            "category_name",
            "created_at",
            "updated_at",
        ]

    def get_category_name(self, obj):
        return obj.category.name if obj.category_id else None

    def validate(self, attrs):
        if self.partial and not attrs:
            raise serializers.ValidationError("No fields to update")
        # Blank strings are stored as NULL
        for field in ("description", "image_url"):
            if field in attrs and not attrs[field]:
                attrs[field] = None
        return attrs
