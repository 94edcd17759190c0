from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import RegisterView, LoginView, MeView, UserViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r'users', UserViewSet, basename='user')

urlpatterns = [
    path('auth/register', RegisterView.as_view(), name='auth-register'),
    path('auth/login', LoginView.as_view(), name='auth-login'),
    path('auth/me', MeView.as_view(), name='auth-me'),
    path('', include(router.urls)),
]
