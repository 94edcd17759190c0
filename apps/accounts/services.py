import logging
from datetime import datetime, timezone

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework_simplejwt.exceptions import TokenError

from apps.analytics.services import ActivityService
from apps.utils.exceptions import (
    ExpiredToken,
    InvalidCredentials,
    InvalidToken,
    NotFoundError,
    ValidationFailed,
)
from .models import Role
from .tokens import DashboardAccessToken

logger = logging.getLogger(__name__)

User = get_user_model()


class AuthService:
    """
    Credential checks and bearer token issue/verify.
    There is no revocation list: a token stays valid until it expires.
    """

    @staticmethod
    def authenticate(email: str, password: str) -> dict:
        user = User.objects.filter(email__iexact=email).first()

        # Same error for unknown email and wrong password
        if user is None or not user.is_active or not user.check_password(password):
            logger.warning("Login failed", extra={"user_id": str(user.id) if user else None})
            raise InvalidCredentials()

        logger.info("Login successful", extra={"user_id": str(user.id)})
        return {"token": AuthService.issue_token(user), "user": user}

    @staticmethod
    def issue_token(user) -> str:
        return str(DashboardAccessToken.for_user(user))

    @staticmethod
    def verify_token(raw_token) -> DashboardAccessToken:
        try:
            return DashboardAccessToken(raw_token)
        except TokenError as exc:
            if AuthService._is_authentic_but_expired(raw_token):
                raise ExpiredToken() from exc
            raise InvalidToken() from exc

    @staticmethod
    def _is_authentic_but_expired(raw_token) -> bool:
        jwt_settings = settings.SIMPLE_JWT
        try:
            payload = jwt.decode(
                raw_token,
                jwt_settings["SIGNING_KEY"],
                algorithms=[jwt_settings.get("ALGORITHM", "HS256")],
                options={"verify_exp": False},
            )
        except jwt.PyJWTError:
            return False
        exp = payload.get("exp")
        return exp is not None and datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(timezone.utc)

    @staticmethod
    @transaction.atomic
    def register(name: str, email: str, password: str, role: str = Role.CUSTOMER, avatar_url=None):
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationFailed("User with this email already exists")

        user = User.objects.create_user(
            email=email,
            password=password,
            name=name,
            role=role,
            avatar_url=avatar_url or None,
        )
        ActivityService.record(user, "REGISTER", f"New user registered: {name} ({email})")
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user


class UserService:

    @staticmethod
    def get_user(user_id):
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("User not found")

    @staticmethod
    @transaction.atomic
    def delete_user(user_id):
        user = UserService.get_user(user_id)

        if user.role == Role.SUPER_ADMIN:
            raise ValidationFailed("Cannot delete super admin user")

        # Orders keep a PROTECT reference to their owner
        if user.orders.exists():
            raise ValidationFailed("Cannot delete user with existing orders")

        user.delete()
        logger.info("User deleted", extra={"user_id": str(user_id)})
