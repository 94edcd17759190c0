from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import MediaFileViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r'media', MediaFileViewSet, basename='media')

urlpatterns = [
    path('', include(router.urls)),
]
