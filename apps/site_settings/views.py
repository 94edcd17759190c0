from rest_framework.views import APIView

from apps.accounts.permissions import IsAdminOrReadOnly
from apps.utils.responses import success_response

from .serializers import SiteSettingSerializer, SiteSettingUpdateSerializer
from .services import SiteSettingsService


class SiteSettingsView(APIView):
    """
    GET /api/settings   all settings ordered by key
    PUT /api/settings   upsert one key (admin)
    """
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        return success_response(SiteSettingsService.snapshot())

    def put(self, request):
        serializer = SiteSettingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        setting = SiteSettingsService.upsert(**serializer.validated_data)
        return success_response(SiteSettingSerializer(setting).data, message="Setting updated successfully")
