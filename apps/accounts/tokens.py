from rest_framework_simplejwt.tokens import AccessToken


class DashboardAccessToken(AccessToken):
    """
    Signed, time-limited bearer token carrying {userId, email, role}.
    userId is written by simplejwt itself (USER_ID_CLAIM).
    """

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token["email"] = user.email
        token["role"] = user.role
        return token
