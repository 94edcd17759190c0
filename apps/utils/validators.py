import re

from django.utils import timezone
from rest_framework import serializers


def validate_card_number(value):
    digits = re.sub(r"[\s\-]", "", str(value))
    if not re.fullmatch(r"\d{4,19}", digits):
        raise serializers.ValidationError("Card number must contain 4 to 19 digits.")
    return digits


def validate_expiry_year(value):
    if value < timezone.now().year:
        raise serializers.ValidationError("Expiry year cannot be in the past.")
    return value


def mask_card_number(digits):
    """
    Keep only the last four digits, e.g. '**** **** **** 4242'.
    """
    if not digits:
        return digits
    return f"**** **** **** {digits[-4:]}"
