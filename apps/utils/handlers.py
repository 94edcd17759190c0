# apps/utils/handlers.py
# Kept apart from exceptions.py: rest_framework.views resolves the
# authentication classes at import time, and those import the exception classes.
import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import BusinessLogicException

logger = logging.getLogger(__name__)


def _detail_message(data):
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, list) and data:
        return str(data[0])
    return "Request failed"


def envelope_exception_handler(exc, context):
    """
    Renders every API error as {success: false, message, errors?}.
    """
    if isinstance(exc, BusinessLogicException):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", exc_info=exc.__cause__ or exc)
        return Response(exc.as_envelope(), status=exc.status_code)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # If response is None, it's an unhandled server error (500)
    if response is None:
        logger.error(f"Unhandled Exception: {exc}", exc_info=True)
        return Response(
            {"success": False, "message": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        errors = response.data
        message = "Invalid input data"
        # Object-level errors ("No fields to update") read better as the message itself
        if isinstance(errors, dict) and list(errors) == ["non_field_errors"]:
            message = str(errors["non_field_errors"][0])
        elif isinstance(errors, list) and errors:
            message = str(errors[0])
        response.data = {
            "success": False,
            "message": message,
            "errors": errors,
        }
    else:
        response.data = {"success": False, "message": _detail_message(response.data)}
    return response
