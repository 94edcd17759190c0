from rest_framework import status


class BusinessLogicException(Exception):
    """
    Base class for every domain error raised by the service layer.
    Carries enough information to render the standard error envelope.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."
    default_code = "business_error"

    def __init__(self, message=None, code=None, errors=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.errors = errors
        super().__init__(self.message)

    def as_envelope(self):
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(BusinessLogicException):
    default_message = "Invalid input data"
    default_code = "validation_error"


class AuthError(BusinessLogicException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"
    default_code = "auth_error"


class InvalidCredentials(AuthError):
    default_message = "Invalid email or password"
    default_code = "invalid_credentials"


class InvalidToken(AuthError):
    default_message = "Invalid token"
    default_code = "invalid_token"


class ExpiredToken(AuthError):
    default_message = "Token has expired"
    default_code = "expired_token"


class NotFoundError(BusinessLogicException):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
    default_code = "not_found"


class IdempotencyConflict(BusinessLogicException):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Idempotency key was already used with a different request"
    default_code = "idempotency_conflict"


class InsufficientStock(BusinessLogicException):
    default_code = "insufficient_stock"

    def __init__(self, product_id, available, requested):
        self.product_id = str(product_id)
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {self.product_id}. "
            f"Required: {requested}, Available: {available}",
            errors=[{
                "product_id": self.product_id,
                "available": available,
                "requested": requested,
            }],
        )


class StorageError(BusinessLogicException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
    default_code = "storage_error"


class OrderCreationFailed(StorageError):
    default_message = "Order could not be created. No changes were saved."
    default_code = "order_creation_failed"
