from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from apps.utils.exceptions import AuthError
from .services import AuthService


class BearerTokenAuthentication(JWTAuthentication):
    """
    First credential carrier: `Authorization: Bearer <token>`.
    When no bearer header is sent DRF falls through to SessionAuthentication
    (see REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"]).
    """

    def get_validated_token(self, raw_token):
        try:
            return AuthService.verify_token(raw_token)
        except AuthError as exc:
            raise AuthenticationFailed(exc.message, code=exc.code)
