import os
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

import jwt
from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from apps.analytics.models import ActivityLog
from apps.catalog.models import Product
from apps.orders.models import Order
from apps.utils.exceptions import ExpiredToken, InvalidCredentials, InvalidToken
from .models import Role, User
from .services import AuthService
from .tokens import DashboardAccessToken


class AuthServiceTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="ana@example.com", password="secret123", name="Ana")

    def test_password_is_hashed_with_bcrypt(self):
        self.assertNotEqual(self.user.password, "secret123")
        self.assertTrue(self.user.password.startswith("bcrypt_sha256$"))
        self.assertTrue(self.user.check_password("secret123"))

    def test_authenticate_returns_token_with_claims(self):
        result = AuthService.authenticate("ana@example.com", "secret123")
        self.assertEqual(result["user"], self.user)

        claims = AuthService.verify_token(result["token"])
        self.assertEqual(claims["userId"], str(self.user.id))
        self.assertEqual(claims["email"], "ana@example.com")
        self.assertEqual(claims["role"], Role.CUSTOMER)

    def test_wrong_password_and_unknown_email_fail_alike(self):
        with self.assertRaises(InvalidCredentials) as wrong_password:
            AuthService.authenticate("ana@example.com", "nope")
        with self.assertRaises(InvalidCredentials) as unknown_email:
            AuthService.authenticate("ghost@example.com", "secret123")
        self.assertEqual(wrong_password.exception.message, unknown_email.exception.message)

    def test_expired_token(self):
        token = DashboardAccessToken.for_user(self.user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        with self.assertRaises(ExpiredToken):
            AuthService.verify_token(str(token))

    def test_foreign_signature_is_invalid(self):
        forged = jwt.encode(
            {"token_type": "access", "userId": str(self.user.id), "exp": 4102444800, "jti": "x"},
            "some-other-key",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            AuthService.verify_token(forged)

    def test_garbage_token_is_invalid(self):
        with self.assertRaises(InvalidToken):
            AuthService.verify_token("not-a-token")


class AuthAPITests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_register_creates_customer_and_logs_activity(self):
        response = self.client.post("/api/auth/register", {
            "name": "Budi",
            "email": "budi@example.com",
            "password": "secret123",
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["role"], Role.CUSTOMER)
        self.assertNotIn("password", response.data["data"])
        self.assertTrue(ActivityLog.objects.filter(action="REGISTER").exists())

    def test_register_duplicate_email(self):
        User.objects.create_user(email="budi@example.com", password="secret123", name="Budi")
        response = self.client.post("/api/auth/register", {
            "name": "Budi Again",
            "email": "BUDI@example.com",
            "password": "secret123",
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "User with this email already exists")

    def test_register_validation(self):
        response = self.client.post("/api/auth/register", {"name": "B", "email": "bad", "password": "1"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("email", response.data["errors"])

    def test_login_and_me(self):
        User.objects.create_user(email="cici@example.com", password="secret123", name="Cici")
        response = self.client.post("/api/auth/login", {"email": "cici@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Login successful")
        token = response.data["token"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        me = self.client.get("/api/auth/me")
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["data"]["email"], "cici@example.com")

    def test_login_wrong_password(self):
        User.objects.create_user(email="cici@example.com", password="secret123", name="Cici")
        response = self.client.post("/api/auth/login", {"email": "cici@example.com", "password": "wrong"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {"success": False, "message": "Invalid email or password"})

    def test_me_requires_credentials(self):
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_me_with_expired_token(self):
        user = User.objects.create_user(email="dodi@example.com", password="secret123", name="Dodi")
        token = DashboardAccessToken.for_user(user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Token has expired")

    def test_me_with_invalid_token(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Invalid token")

    def test_session_fallback(self):
        user = User.objects.create_user(email="eka@example.com", password="secret123", name="Eka")
        self.client.force_login(user)
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["id"], str(user.id))


class UserAPITests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="secret123", name="Admin", role=Role.ADMIN,
        )
        self.customer = User.objects.create_user(email="cust@example.com", password="secret123", name="Customer")
        self.client.force_authenticate(self.admin)

    def test_customer_cannot_manage_users(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get("/api/users")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Admin access required")

    def test_list_paginated_with_search(self):
        response = self.client.get("/api/users", {"search": "cust", "limit": 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 1)
        self.assertEqual(response.data["pagination"], {"page": 1, "limit": 5, "total": 1, "totalPages": 1})

    def test_create_user(self):
        response = self.client.post("/api/users", {
            "name": "Fajar",
            "email": "fajar@example.com",
            "password": "secret123",
            "role": Role.ADMIN,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user = User.objects.get(email="fajar@example.com")
        self.assertTrue(user.check_password("secret123"))
        self.assertEqual(user.role, Role.ADMIN)

    def test_create_requires_password(self):
        response = self.client.post("/api/users", {"name": "Fajar", "email": "fajar@example.com"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data["errors"])

    def test_update_rehashes_password_and_checks_email(self):
        url = f"/api/users/{self.customer.id}"
        response = self.client.put(url, {"password": "newpass99"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertTrue(self.customer.check_password("newpass99"))

        taken = self.client.put(url, {"email": "admin@example.com"})
        self.assertEqual(taken.status_code, status.HTTP_400_BAD_REQUEST)

        empty = self.client.put(url, {})
        self.assertEqual(empty.data["message"], "No fields to update")

    def test_retrieve_unknown_user(self):
        response = self.client.get("/api/users/00000000-0000-0000-0000-000000000000")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "User not found")

    def test_cannot_delete_super_admin(self):
        root = User.objects.create_superuser(email="root@example.com", password="secret123", name="Root")
        response = self.client.delete(f"/api/users/{root.id}")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.filter(pk=root.pk).exists())

    def test_cannot_delete_user_with_orders(self):
        product = Product.objects.create(name="Kopi", price=Decimal("10.00"), stock_quantity=5)
        order = Order.objects.create(
            user=self.customer,
            total_amount=Decimal("10.00"),
            shipping_address="Jl. Merdeka 1",
            phone="0812",
            payment_method="COD",
        )
        order.items.create(product=product, quantity=1, price_per_unit=Decimal("10.00"))

        response = self.client.delete(f"/api/users/{self.customer.id}")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cannot delete user with existing orders")

    def test_delete_user(self):
        response = self.client.delete(f"/api/users/{self.customer.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.customer.pk).exists())


class CreateAdminCommandTests(TestCase):

    @override_settings(DEBUG=True)
    def test_creates_super_admin_from_env(self):
        with patch.dict(os.environ, {"ADMIN_EMAIL": "root@example.com", "ADMIN_PASSWORD": "secret123"}):
            call_command("create_admin", stdout=StringIO())

        user = User.objects.get(email="root@example.com")
        self.assertEqual(user.role, Role.SUPER_ADMIN)
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password("secret123"))

    @override_settings(DEBUG=False)
    def test_refuses_in_production_without_flag(self):
        with patch.dict(os.environ, {"ADMIN_EMAIL": "root@example.com", "ADMIN_PASSWORD": "secret123"}):
            with self.assertRaises(CommandError):
                call_command("create_admin", stdout=StringIO())
        self.assertFalse(User.objects.filter(email="root@example.com").exists())
