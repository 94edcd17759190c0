# apps/utils/tests.py
import json
import logging
import os
import subprocess
import sys
from io import StringIO
from unittest.mock import patch

from django.conf import settings
from django.core.management import call_command
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIClient

from .exceptions import InsufficientStock, NotFoundError, OrderCreationFailed
from .handlers import envelope_exception_handler
from .logging import JSONFormatter
from .validators import mask_card_number, validate_card_number, validate_expiry_year


class ValidatorTests(SimpleTestCase):
    def test_card_number_validator(self):
        self.assertEqual(validate_card_number("4242 4242-4242 4242"), "4242424242424242")
        with self.assertRaises(ValidationError):
            validate_card_number("42")
        with self.assertRaises(ValidationError):
            validate_card_number("4242abcd")

    def test_expiry_year_validator(self):
        self.assertEqual(validate_expiry_year(2999), 2999)
        with self.assertRaises(ValidationError):
            validate_expiry_year(2000)

    def test_mask_card_number(self):
        self.assertEqual(mask_card_number("4242424242421234"), "**** **** **** 1234")
        self.assertIsNone(mask_card_number(None))


class JSONFormatterTests(SimpleTestCase):
    def _record(self, msg, **extra):
        record = logging.LogRecord("apps.test", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_redacts_sensitive_keys(self):
        line = JSONFormatter().format(self._record({"email": "a@b.c", "password": "hunter2"}))
        payload = json.loads(line)
        self.assertIn("***REDACTED***", payload["msg"])
        self.assertNotIn("hunter2", payload["msg"])

    def test_copies_context_fields(self):
        payload = json.loads(JSONFormatter().format(self._record("placed", order_id="abc")))
        self.assertEqual(payload["order_id"], "abc")
        self.assertEqual(payload["lvl"], "INFO")


class ExceptionHandlerTests(SimpleTestCase):
    def test_business_error_envelope(self):
        response = envelope_exception_handler(NotFoundError("Product not found"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"success": False, "message": "Product not found"})

    def test_insufficient_stock_carries_details(self):
        response = envelope_exception_handler(InsufficientStock("p1", available=2, requested=5), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.data["message"],
            "Insufficient stock for product p1. Required: 5, Available: 2",
        )
        self.assertEqual(response.data["errors"][0]["available"], 2)

    def test_storage_error_is_500(self):
        response = envelope_exception_handler(OrderCreationFailed(), {})
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.data["success"])

    def test_field_validation_error(self):
        response = envelope_exception_handler(ValidationError({"name": ["This field is required."]}), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Invalid input data")
        self.assertIn("name", response.data["errors"])

    def test_object_validation_error_becomes_message(self):
        exc = ValidationError({"non_field_errors": ["No fields to update"]})
        response = envelope_exception_handler(exc, {})
        self.assertEqual(response.data["message"], "No fields to update")

    def test_drf_not_found(self):
        response = envelope_exception_handler(NotFound("Gone"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"success": False, "message": "Gone"})

    def test_unhandled_exception_is_generic_500(self):
        response = envelope_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["message"], "Internal server error")


class HealthCheckTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_health_ok(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["components"], {"db": "ok", "cache": "ok"})

    def test_health_db_down(self):
        with patch("apps.utils.health.connection") as conn:
            conn.cursor.side_effect = DatabaseError("down")
            response = self.client.get("/api/health")
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()["components"]["db"], "unknown")


class StartupTests(SimpleTestCase):
    """
    Each module is imported first in a fresh interpreter, so an import
    cycle through the DRF settings shows up here and not only at deploy time.
    """

    def _import_first(self, module):
        env = {**os.environ, "DJANGO_SETTINGS_MODULE": "config.settings", "DEBUG": "True"}
        result = subprocess.run(
            [sys.executable, "-c", f"import django; django.setup(); import {module}"],
            capture_output=True,
            text=True,
            cwd=settings.BASE_DIR,
            env=env,
            timeout=120,
        )
        self.assertEqual(result.returncode, 0, result.stderr)

    def test_exceptions_import_first(self):
        self._import_first("apps.utils.exceptions")

    def test_handlers_import_first(self):
        self._import_first("apps.utils.handlers")

    def test_order_services_import_first(self):
        self._import_first("apps.orders.services")

    def test_drf_views_import_first(self):
        self._import_first("rest_framework.views")

    def test_system_check(self):
        out = StringIO()
        call_command("check", stdout=out)
        self.assertIn("no issues", out.getvalue())
