from django.conf import settings
from django.db import models

from apps.utils.models import TimestampedModel


class MediaFile(TimestampedModel):
    """
    Metadata for a file already stored elsewhere (CDN / bucket).
    The bytes themselves never pass through this service.
    """
    file_name = models.CharField(max_length=255)
    file_url = models.URLField(max_length=1000)
    file_type = models.CharField(max_length=100, db_index=True)
    file_size_kb = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="media_files",
    )

    class Meta:
        db_table = "media_library"
        ordering = ["-created_at"]

    def __str__(self):
        return self.file_name
