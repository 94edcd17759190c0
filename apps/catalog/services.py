# apps/catalog/services.py
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.utils.exceptions import NotFoundError, ValidationFailed
from .models import Category, Product

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    def get_product(product_id) -> Product:
        try:
            return Product.objects.select_related("category").get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Product not found")

    @staticmethod
    @transaction.atomic
    def delete_product(product_id):
        product = ProductService.get_product(product_id)

        # Line items keep the price snapshot but still point at the product
        if product.order_items.exists():
            raise ValidationFailed("Cannot delete product that is part of existing orders")

        product.delete()
        logger.info(f"Product {product_id} deleted", extra={"product_id": str(product_id)})


class CategoryService:

    @staticmethod
    def get_category(category_id) -> Category:
        try:
            return Category.objects.get(pk=category_id)
        except (Category.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Category not found")

    @staticmethod
    @transaction.atomic
    def delete_category(category_id):
        category = CategoryService.get_category(category_id)

        if category.products.exists():
            raise ValidationFailed("Cannot delete category with existing products")

        category.delete()
