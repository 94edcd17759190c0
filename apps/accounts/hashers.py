from django.contrib.auth.hashers import BCryptSHA256PasswordHasher
from django.conf import settings


class StoreBCryptPasswordHasher(BCryptSHA256PasswordHasher):
    """
    bcrypt with the cost factor taken from settings (default 10).
    """
    rounds = getattr(settings, "PASSWORD_BCRYPT_ROUNDS", 10)
