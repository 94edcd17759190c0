# apps/analytics/tests.py
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.models import Role, User
from apps.catalog.models import Product
from apps.orders.models import Order
from apps.payments.models import PaymentMethod
from .models import ActivityLog
from .services import MONTHS_IN_SERIES, ActivityService, DashboardService


class DashboardServiceTests(TestCase):
    def setUp(self):
        self.customer = User.objects.create_user(email="cust@example.com", password="test1234", name="Cust")
        self.tea = Product.objects.create(name="Tea", price=Decimal("5.00"), stock_quantity=3)
        self.rice = Product.objects.create(name="Rice", price=Decimal("12.00"), stock_quantity=40)

        self.completed = self._order(Decimal("50.00"), Order.Status.COMPLETED, [(self.tea, 4)])
        self._order(Decimal("20.00"), Order.Status.PENDING, [(self.rice, 7)])

    def _order(self, total, order_status, lines):
        order = Order.objects.create(
            user=self.customer,
            total_amount=total,
            status=order_status,
            shipping_address="Jl. Sudirman 5",
            phone="0812",
            payment_method="COD",
        )
        for product, qty in lines:
            order.items.create(product=product, quantity=qty, price_per_unit=product.price)
        return order

    def test_overview_counts_only_completed_revenue(self):
        overview = DashboardService.admin_stats()["overview"]
        self.assertEqual(overview["totalUsers"], 1)
        self.assertEqual(overview["totalProducts"], 2)
        self.assertEqual(overview["totalOrders"], 2)
        self.assertEqual(overview["totalRevenue"], Decimal("50.00"))
        self.assertEqual(overview["recentOrders"], 2)
        self.assertEqual(overview["lowStockProducts"], 1)
        self.assertEqual(overview["avgOrderValue"], Decimal("50.00"))

    def test_monthly_series_are_zero_filled(self):
        charts = DashboardService.admin_stats()["charts"]
        revenue = charts["monthlyRevenue"]
        self.assertEqual(len(revenue), MONTHS_IN_SERIES)
        self.assertEqual(revenue[-1]["month"], timezone.localdate().strftime("%Y-%m"))
        self.assertEqual(revenue[-1]["revenue"], Decimal("50.00"))
        self.assertTrue(all(point["revenue"] == 0 for point in revenue[:-1]))
        self.assertEqual(charts["monthlyOrders"][-1]["orders"], 2)
        self.assertEqual(charts["monthlyUsers"][-1]["users"], 1)

    def test_top_products_use_completed_orders(self):
        top = DashboardService.admin_stats()["charts"]["topProducts"]
        self.assertEqual(top[0]["name"], "Tea")
        self.assertEqual(top[0]["total_sold"], 4)
        rice = next(p for p in top if p["name"] == "Rice")
        self.assertEqual(rice["total_sold"], 0)

    def test_customer_summary(self):
        PaymentMethod.objects.create(user=self.customer, type="E_WALLET", provider="GoPay")
        summary = DashboardService.customer_summary(self.customer)
        self.assertEqual(summary["totalOrders"], 2)
        self.assertEqual(summary["totalSpent"], Decimal("50.00"))
        self.assertEqual(summary["paymentMethodsCount"], 1)
        self.assertEqual(len(summary["recentOrders"]), 2)

    def test_recent_activity_is_capped(self):
        for i in range(20):
            ActivityService.record(self.customer, "ORDER", f"Order {i}")
        feed = ActivityService.recent()
        self.assertEqual(len(feed), 15)
        self.assertEqual(feed[0]["user"]["name"], "Cust")


class DashboardAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="test1234", name="Admin", role=Role.ADMIN,
        )
        self.customer = User.objects.create_user(email="cust@example.com", password="test1234", name="Cust")

    def test_stats_admin_only(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/dashboard/stats").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/dashboard/stats")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("overview", response.data["data"])

    def test_activity_feed(self):
        ActivityLog.objects.create(user=self.customer, action="REGISTER", details="New user")
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/dashboard/activity")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"][0]["action"], "REGISTER")

    def test_customer_dashboard(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get("/api/dashboard/customer")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["totalOrders"], 0)

    def test_anonymous_rejected(self):
        response = self.client.get("/api/dashboard/customer")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
