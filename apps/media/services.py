import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q

from apps.utils.exceptions import NotFoundError
from .models import MediaFile

logger = logging.getLogger(__name__)


class MediaService:

    @staticmethod
    def search(term=None):
        qs = MediaFile.objects.select_related("uploaded_by").order_by("-created_at")
        if term:
            qs = qs.filter(Q(file_name__icontains=term) | Q(file_type__icontains=term))
        return qs

    @staticmethod
    def get_file(file_id) -> MediaFile:
        try:
            return MediaFile.objects.select_related("uploaded_by").get(pk=file_id)
        except (MediaFile.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Media file not found")

    @staticmethod
    def register(uploader, **data) -> MediaFile:
        data.setdefault("uploaded_by", uploader)
        media = MediaFile.objects.create(**data)
        logger.info(f"Media file {media.id} registered by {media.uploaded_by_id}")
        return media

    @staticmethod
    def delete_file(media):
        media_id = media.pk
        media.delete()
        logger.info(f"Media file {media_id} deleted")
