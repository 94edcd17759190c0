# apps/orders/tests.py
import concurrent.futures
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError, connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from django.urls import reverse

from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Product
from apps.orders.models import Order, OrderItem
from apps.orders.services import OrderService
from apps.utils.exceptions import (
    IdempotencyConflict,
    InsufficientStock,
    NotFoundError,
    OrderCreationFailed,
    ValidationFailed,
)


User = get_user_model()


def _line(product, quantity, price="100.00"):
    return {"product_id": product.id, "quantity": quantity, "price_per_unit": Decimal(price)}


class PlaceOrderServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="buyer@example.com", name="Buyer", password="secret123")
        self.p1 = Product.objects.create(name="Lamp", price=Decimal("100.00"), stock_quantity=5)
        self.p2 = Product.objects.create(name="Bulb", price=Decimal("3.00"), stock_quantity=2)

    def _place(self, items, total="200.00", **kwargs):
        return OrderService.place_order(
            self.user,
            total_amount=Decimal(total),
            shipping_address="42 Elm Street",
            phone="555-0101",
            payment_method="CREDIT_CARD",
            items=items,
            **kwargs,
        )

    def test_scenario_a_order_created_and_stock_decremented(self):
        order, payload = self._place([_line(self.p1, 2)])

        self.assertEqual(order.status, Order.Status.PENDING)
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 3)
        self.assertEqual(payload["customer_name"], "Buyer")
        self.assertEqual(payload["items"][0]["product_name"], "Lamp")
        self.assertEqual(payload["items"][0]["quantity"], 2)

    def test_scenario_b_insufficient_stock_leaves_stock_untouched(self):
        with self.assertRaises(InsufficientStock) as ctx:
            self._place([_line(self.p1, 10)])

        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(ctx.exception.requested, 10)
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 5)
        self.assertEqual(Order.objects.count(), 0)

    def test_scenario_c_update_status(self):
        order, _ = self._place([_line(self.p1, 1)])

        updated = OrderService.update_status(order.id, Order.Status.SHIPPED)
        self.assertEqual(updated.status, Order.Status.SHIPPED)

        with self.assertRaises(NotFoundError):
            OrderService.update_status("00000000-0000-4000-8000-000000000000", Order.Status.SHIPPED)

    def test_status_transitions_are_permissive(self):
        order, _ = self._place([_line(self.p1, 1)])
        OrderService.update_status(order.id, Order.Status.COMPLETED)
        back = OrderService.update_status(order.id, Order.Status.PENDING)
        self.assertEqual(back.status, Order.Status.PENDING)

    def test_later_line_failure_rolls_back_earlier_lines(self):
        with self.assertRaises(InsufficientStock):
            self._place([_line(self.p1, 2), _line(self.p2, 3)])

        self.p1.refresh_from_db()
        self.p2.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 5)
        self.assertEqual(self.p2.stock_quantity, 2)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_storage_failure_mid_transaction_rolls_back_everything(self):
        real_create = OrderItem.objects.create
        calls = {"n": 0}

        def flaky_create(**kwargs):
            calls["n"] += 1
            if calls["n"] == 2:
                raise DatabaseError("disk full")
            return real_create(**kwargs)

        with patch.object(OrderItem.objects, "create", side_effect=flaky_create):
            with self.assertRaises(OrderCreationFailed):
                self._place([_line(self.p1, 2), _line(self.p2, 1)])

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 5)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_unknown_product_is_not_found_and_rolls_back(self):
        missing = {"product_id": "00000000-0000-4000-8000-00000000abcd", "quantity": 1, "price_per_unit": Decimal("1")}
        with self.assertRaises(NotFoundError):
            self._place([_line(self.p1, 1), missing])

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 5)
        self.assertEqual(Order.objects.count(), 0)

    def test_stock_conservation(self):
        self._place([_line(self.p1, 2), _line(self.p2, 1)])
        self._place([_line(self.p1, 1)])

        for product, initial in ((self.p1, 5), (self.p2, 2)):
            product.refresh_from_db()
            sold = sum(i.quantity for i in OrderItem.objects.filter(product=product))
            self.assertEqual(product.stock_quantity, initial - sold)

    def test_total_is_stored_as_submitted(self):
        order, _ = self._place([_line(self.p1, 2)], total="1.00")
        order.refresh_from_db()
        self.assertEqual(order.total_amount, Decimal("1.00"))

    def test_price_per_unit_is_a_snapshot(self):
        order, _ = self._place([_line(self.p1, 1, price="80.00")])
        Product.objects.filter(pk=self.p1.pk).update(price=Decimal("999.00"))

        item = OrderItem.objects.get(order=order)
        self.assertEqual(item.price_per_unit, Decimal("80.00"))

    def test_enrichment_failure_degrades_payload_but_keeps_order(self):
        with patch.object(OrderService, "enriched_queryset", side_effect=DatabaseError("replica down")):
            order, payload = self._place([_line(self.p1, 1)])

        self.assertTrue(Order.objects.filter(pk=order.pk).exists())
        self.assertNotIn("customer_name", payload)
        self.assertEqual(payload["id"], str(order.id))
        self.assertEqual(len(payload["items"]), 1)
        self.assertNotIn("product_name", payload["items"][0])

    def test_idempotency_key_replays_existing_order(self):
        first, _ = self._place([_line(self.p1, 2)], idempotency_key="checkout-1")
        second, _ = self._place([_line(self.p1, 2)], idempotency_key="checkout-1")

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Order.objects.count(), 1)
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 3)

    def test_last_unit_sequential(self):
        self.p2.stock_quantity = 1
        self.p2.save(update_fields=["stock_quantity"])

        self._place([_line(self.p2, 1)])
        with self.assertRaises(InsufficientStock):
            self._place([_line(self.p2, 1)])

        self.p2.refresh_from_db()
        self.assertEqual(self.p2.stock_quantity, 0)
        self.assertEqual(Order.objects.count(), 1)

    def test_delete_does_not_restore_stock(self):
        order, _ = self._place([_line(self.p1, 2)])

        OrderService.delete_order(order.id)

        self.assertFalse(OrderItem.objects.filter(order_id=order.id).exists())
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 3)

        with self.assertRaises(NotFoundError):
            OrderService.delete_order(order.id)

    def test_idempotency_key_with_different_payload_conflicts(self):
        self._place([_line(self.p1, 2)], idempotency_key="checkout-2")

        with self.assertRaises(IdempotencyConflict):
            self._place([_line(self.p1, 3)], idempotency_key="checkout-2")
        with self.assertRaises(IdempotencyConflict):
            self._place([_line(self.p1, 2)], total="150.00", idempotency_key="checkout-2")

        self.assertEqual(Order.objects.count(), 1)
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.stock_quantity, 3)

    def test_stock_taken_between_lock_and_guarded_update(self):
        self.p2.stock_quantity = 1
        self.p2.save(update_fields=["stock_quantity"])
        real_create = OrderItem.objects.create

        def rival_takes_last_unit(**kwargs):
            item = real_create(**kwargs)
            # Another checkout decrements after our line insert, before our UPDATE
            Product.objects.filter(pk=self.p2.pk).update(stock_quantity=0)
            return item

        with patch.object(OrderItem.objects, "create", side_effect=rival_takes_last_unit):
            with self.assertRaises(InsufficientStock) as ctx:
                self._place([_line(self.p2, 1)])

        # The guard saw the rival's write, not a stale read
        self.assertEqual(ctx.exception.available, 0)
        self.assertEqual(ctx.exception.requested, 1)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)
        self.p2.refresh_from_db()
        self.assertGreaterEqual(self.p2.stock_quantity, 0)

    def test_list_orders_scopes_customers(self):
        other = User.objects.create_user(email="other@example.com", name="Other", password="secret123")
        admin = User.objects.create_user(email="boss@example.com", name="Boss", password="secret123", role="ADMIN")
        mine, _ = self._place([_line(self.p1, 1)])
        OrderService.place_order(
            other, total_amount=Decimal("100"), shipping_address="x", phone="1",
            payment_method="CASH", items=[_line(self.p1, 1)],
        )

        self.assertEqual(list(OrderService.list_orders(viewer=self.user)), [mine])
        self.assertEqual(OrderService.list_orders(user_id=other.id, viewer=self.user).count(), 0)
        self.assertEqual(OrderService.list_orders(viewer=admin).count(), 2)
        self.assertEqual(OrderService.list_orders(user_id=other.id, viewer=admin).count(), 1)
        self.assertEqual(OrderService.list_orders(status="shipped", viewer=admin).count(), 0)

    def test_list_orders_rejects_malformed_user_id(self):
        with self.assertRaises(ValidationFailed) as ctx:
            OrderService.list_orders(user_id="not-a-uuid")
        self.assertIn("userId", ctx.exception.errors)

class OrderConcurrencyTests(TransactionTestCase):
    # Real transactions are needed so two threads see each other's commits

    def setUp(self):
        self.product = Product.objects.create(name="Last One", price=Decimal("10.00"), stock_quantity=1)
        self.user1 = User.objects.create_user(email="u1@example.com", name="User One", password="secret123")
        self.user2 = User.objects.create_user(email="u2@example.com", name="User Two", password="secret123")

    @skipUnlessDBFeature("has_select_for_update")
    def test_concurrent_orders_for_last_unit(self):
        """Two buyers racing for the last unit: exactly one wins."""
        def place(user_id):
            user = User.objects.get(id=user_id)
            try:
                OrderService.place_order(
                    user,
                    total_amount=Decimal("10.00"),
                    shipping_address="1 Race Rd",
                    phone="555-0000",
                    payment_method="CASH",
                    items=[_line(self.product, 1, price="10.00")],
                )
                return "SUCCESS"
            except InsufficientStock:
                return "FAILED"
            finally:
                connection.close()

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(place, self.user1.id),
                executor.submit(place, self.user2.id),
            ]
            results = [f.result() for f in futures]

        self.assertEqual(results.count("SUCCESS"), 1)
        self.assertEqual(results.count("FAILED"), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)
        self.assertEqual(Order.objects.count(), 1)


class OrderAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role="ADMIN"
        )
        self.customer = User.objects.create_user(email="cust@example.com", name="Casey", password="secret123")
        self.other = User.objects.create_user(email="other@example.com", name="Other", password="secret123")
        self.product = Product.objects.create(name="Kettle", price=Decimal("100.00"), stock_quantity=5)
        self.url = reverse("order-list")

    def _payload(self, **overrides):
        body = {
            "user_id": str(self.customer.id),
            "total_amount": 200,
            "shipping_address": "7 Oak Lane",
            "phone": "555-0199",
            "payment_method": "CREDIT_CARD",
            "items": [{"product_id": str(self.product.id), "quantity": 2, "price_per_unit": 100}],
        }
        body.update(overrides)
        return body

    def test_place_order(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["success"])
        self.assertEqual(resp.data["message"], "Order created successfully")
        self.assertEqual(resp.data["data"]["status"], "PENDING")
        self.assertEqual(resp.data["data"]["customer_email"], "cust@example.com")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_scenario_d_empty_items_rejected_before_storage(self):
        self.client.force_authenticate(self.customer)
        with patch.object(OrderService, "place_order") as mock_place:
            resp = self.client.post(self.url, self._payload(items=[]), format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Invalid input data")
        self.assertIn("items", resp.data["errors"])
        mock_place.assert_not_called()
        self.assertEqual(Order.objects.count(), 0)

    def test_invalid_line_fields_are_reported(self):
        self.client.force_authenticate(self.customer)
        items = [{"product_id": "not-a-uuid", "quantity": 0, "price_per_unit": -1}]
        resp = self.client.post(self.url, self._payload(items=items, phone=""), format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("items", resp.data["errors"])
        self.assertIn("phone", resp.data["errors"])

    def test_insufficient_stock_returns_400(self):
        self.client.force_authenticate(self.customer)
        items = [{"product_id": str(self.product.id), "quantity": 10, "price_per_unit": 100}]
        resp = self.client.post(self.url, self._payload(items=items), format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Insufficient stock", resp.data["message"])
        self.assertEqual(resp.data["errors"][0]["available"], 5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_unknown_product_returns_404(self):
        self.client.force_authenticate(self.customer)
        items = [{"product_id": "00000000-0000-4000-8000-000000000001", "quantity": 1, "price_per_unit": 1}]
        resp = self.client.post(self.url, self._payload(items=items), format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_storage_failure_returns_500_envelope(self):
        self.client.force_authenticate(self.customer)
        with patch.object(OrderService, "_create_with_stock_adjustment", side_effect=DatabaseError("boom")):
            resp = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(resp.data["success"])
        self.assertNotIn("boom", resp.data["message"])

    def test_customer_cannot_order_for_someone_else(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post(self.url, self._payload(user_id=str(self.other.id)), format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_can_order_for_customer(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(self.url, self._payload(), format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(Order.objects.get().user, self.customer)

    def test_idempotency_header(self):
        self.client.force_authenticate(self.customer)
        first = self.client.post(self.url, self._payload(), format="json", HTTP_IDEMPOTENCY_KEY="abc-123")
        second = self.client.post(self.url, self._payload(), format="json", HTTP_IDEMPOTENCY_KEY="abc-123")

        self.assertEqual(first.data["data"]["id"], second.data["data"]["id"])
        self.assertEqual(Order.objects.count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_list_is_scoped_for_customers(self):
        OrderService.place_order(
            self.other, total_amount=Decimal("100"), shipping_address="x", phone="1",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )

        self.client.force_authenticate(self.customer)
        resp = self.client.get(self.url, {"userId": str(self.other.id)})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["pagination"]["total"], 0)

        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url, {"status": "all"})
        self.assertEqual(resp.data["pagination"]["total"], 2)
        self.assertEqual(len(resp.data["data"][0]["items"]), 1)

    def test_status_filter(self):
        order, _ = OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        OrderService.update_status(order.id, Order.Status.PAID)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(self.url, {"status": "PAID"}).data["pagination"]["total"], 1)
        self.assertEqual(self.client.get(self.url, {"status": "SHIPPED"}).data["pagination"]["total"], 0)

    def test_put_status(self):
        order, _ = OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        self.client.force_authenticate(self.admin)

        resp = self.client.put(self.url, {"status": "SHIPPED"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Order ID is required")

        resp = self.client.put(self.url, {"id": str(order.id), "status": "LOST"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.put(
            self.url, {"id": "00000000-0000-4000-8000-000000000009", "status": "SHIPPED"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self.client.put(self.url, {"id": str(order.id), "status": "SHIPPED"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["status"], "SHIPPED")

    def test_customer_cannot_change_status(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.put(self.url, {"id": "x", "status": "SHIPPED"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        order, _ = OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        self.client.force_authenticate(self.admin)

        resp = self.client.delete(self.url)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.delete(f"{self.url}?id={order.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["message"], "Order deleted successfully")

        resp = self.client.delete(f"{self.url}?id={order.id}")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_is_idempotent_and_owner_scoped(self):
        order, _ = OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        detail_url = reverse("order-detail", args=[order.id])

        self.client.force_authenticate(self.customer)
        first = self.client.get(detail_url)
        second = self.client.get(detail_url)
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data, second.data)
        self.assertEqual(first.data["data"]["user"]["email"], "cust@example.com")
        self.assertEqual(first.data["data"]["items"][0]["product_current_price"], Decimal("100.00"))

        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(detail_url).status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_update(self):
        order, _ = OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        detail_url = reverse("order-detail", args=[order.id])
        self.client.force_authenticate(self.admin)

        resp = self.client.put(detail_url, {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "No fields to update")

        resp = self.client.put(detail_url, {"shipping_address": "9 New Road"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["shipping_address"], "9 New Road")

    def test_idempotency_header_with_different_payload_conflicts(self):
        self.client.force_authenticate(self.customer)
        self.client.post(self.url, self._payload(), format="json", HTTP_IDEMPOTENCY_KEY="abc-123")

        items = [{"product_id": str(self.product.id), "quantity": 1, "price_per_unit": 100}]
        resp = self.client.post(
            self.url, self._payload(items=items, total_amount=100), format="json", HTTP_IDEMPOTENCY_KEY="abc-123",
        )

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["message"], "Idempotency key was already used with a different request")
        self.assertEqual(Order.objects.count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_page_past_the_end_is_empty(self):
        OrderService.place_order(
            self.customer, total_amount=Decimal("100"), shipping_address="y", phone="2",
            payment_method="CASH", items=[_line(self.product, 1)],
        )
        self.client.force_authenticate(self.admin)

        resp = self.client.get(self.url, {"page": 3})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"], [])
        self.assertEqual(resp.data["pagination"], {"page": 3, "limit": 10, "total": 1, "totalPages": 1})

    def test_malformed_user_filter_rejected(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get(self.url, {"userId": "not-a-uuid"})

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data["success"])
        self.assertIn("userId", resp.data["errors"])
