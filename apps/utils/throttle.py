from rest_framework.throttling import UserRateThrottle, AnonRateThrottle


class BurstRateThrottle(UserRateThrottle):
    """
    Short window limit for authenticated API usage.
    Scope: 'burst'
    """
    scope = 'burst'


class SustainedRateThrottle(UserRateThrottle):
    """
    General API usage.
    """
    scope = 'sustained'


class LoginRateThrottle(AnonRateThrottle):
    """
    Strict IP-based throttling for login / register attempts.
    """
    scope = 'login'
