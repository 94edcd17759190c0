from rest_framework import viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from apps.utils.pagination import MediaResultsSetPagination
from apps.utils.responses import success_response

from .serializers import MediaFileSerializer
from .services import MediaService


class MediaFileViewSet(viewsets.GenericViewSet):
    """
    GET/POST /api/media, GET/DELETE /api/media/<id>

    Anyone signed in may register files as themselves; admins may
    register on behalf of others and delete any file.
    """
    serializer_class = MediaFileSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = MediaResultsSetPagination

    def get_queryset(self):
        return MediaService.search(self.request.query_params.get("search", "").strip())

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(MediaFileSerializer(page, many=True).data)

    def create(self, request):
        serializer = MediaFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        uploader = serializer.validated_data.get("uploaded_by")
        if uploader is not None and uploader != request.user and not request.user.is_admin:
            raise PermissionDenied("You can only register files as yourself")

        media = MediaService.register(request.user, **serializer.validated_data)
        return success_response(MediaFileSerializer(media).data, message="Media file uploaded successfully")

    def retrieve(self, request, pk=None):
        return success_response(MediaFileSerializer(MediaService.get_file(pk)).data)

    def destroy(self, request, pk=None):
        media = MediaService.get_file(pk)
        if not request.user.is_admin and media.uploaded_by_id != request.user.id:
            raise PermissionDenied("You can only delete your own files")

        MediaService.delete_file(media)
        return success_response(message="Media file deleted successfully")
