# apps/catalog/tests.py
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Category, Product
from apps.orders.models import Order, OrderItem


User = get_user_model()


class ProductAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="ADMIN"
        )
        self.customer = User.objects.create_user(
            email="cust@example.com", name="Customer", password="secret123"
        )
        self.category = Category.objects.create(name="Electronics")
        self.product = Product.objects.create(
            name="Wireless Mouse",
            description="Ergonomic mouse",
            price=Decimal("25.00"),
            stock_quantity=40,
            category=self.category,
        )
        Product.objects.create(name="USB Cable", price=Decimal("5.00"), stock_quantity=100)

    def test_list_requires_authentication(self):
        resp = self.client.get(reverse("product-list"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.data["success"])

    def test_list_is_paginated_and_searchable(self):
        self.client.force_authenticate(self.customer)

        resp = self.client.get(reverse("product-list"), {"search": "mouse", "limit": 5})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["success"])
        self.assertEqual(len(resp.data["data"]), 1)
        self.assertEqual(resp.data["data"][0]["name"], "Wireless Mouse")
        self.assertEqual(resp.data["pagination"]["total"], 1)
        self.assertEqual(resp.data["pagination"]["limit"], 5)

    def test_page_past_the_end_keeps_totals(self):
        self.client.force_authenticate(self.customer)

        resp = self.client.get(reverse("product-list"), {"page": 5, "limit": 1})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"], [])
        self.assertEqual(resp.data["pagination"], {"page": 5, "limit": 1, "total": 2, "totalPages": 2})

    def test_non_numeric_page_is_not_found(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.get(reverse("product-list"), {"page": "abc"})
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_cannot_create(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post(
            reverse("product-list"),
            {"name": "Keyboard", "price": "10.00", "stock_quantity": 3},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_product(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(
            reverse("product-list"),
            {
                "name": "Keyboard",
                "price": "49.90",
                "stock_quantity": 12,
                "category_id": str(self.category.id),
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Product created successfully")
        self.assertTrue(Product.objects.filter(name="Keyboard", stock_quantity=12).exists())

    def test_create_rejects_negative_stock_and_short_name(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(
            reverse("product-list"),
            {"name": "K", "price": "1.00", "stock_quantity": -1},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Invalid input data")
        self.assertIn("name", resp.data["errors"])
        self.assertIn("stock_quantity", resp.data["errors"])

    def test_empty_update_is_rejected(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.put(reverse("product-detail", args=[self.product.id]), {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_partial_update(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.put(
            reverse("product-detail", args=[self.product.id]),
            {"stock_quantity": 7},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)
        self.assertEqual(self.product.name, "Wireless Mouse")

    def test_retrieve_unknown_product_returns_404(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.get(reverse("product-detail", args=["9d7c1e8e-0000-4000-8000-000000000000"]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["message"], "Product not found")

    def test_cannot_delete_product_referenced_by_order(self):
        order = Order.objects.create(
            user=self.customer,
            total_amount=Decimal("25.00"),
            shipping_address="1 Main St",
            phone="555-0100",
            payment_method="CARD",
        )
        OrderItem.objects.create(order=order, product=self.product, quantity=1, price_per_unit=Decimal("25.00"))

        self.client.force_authenticate(self.admin)
        resp = self.client.delete(reverse("product-detail", args=[self.product.id]))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Cannot delete product that is part of existing orders")
        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())

    def test_delete_unreferenced_product(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.delete(reverse("product-detail", args=[self.product.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())


class CategoryAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="SUPER_ADMIN"
        )
        self.category = Category.objects.create(name="Books")
        Category.objects.create(name="Apparel")

    def test_list_is_ordered_by_name(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(reverse("category-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([c["name"] for c in resp.data["data"]], ["Apparel", "Books"])

    def test_create_requires_name(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(reverse("category-list"), {"description": "x"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", resp.data["errors"])

    def test_cannot_delete_category_with_products(self):
        Product.objects.create(name="Novel", price=Decimal("9.99"), stock_quantity=3, category=self.category)

        self.client.force_authenticate(self.admin)
        resp = self.client.delete(reverse("category-detail", args=[self.category.id]))

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Cannot delete category with existing products")

    def test_delete_empty_category(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.delete(reverse("category-detail", args=[self.category.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Category.objects.filter(pk=self.category.pk).exists())
