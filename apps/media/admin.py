from django.contrib import admin
from .models import MediaFile


@admin.register(MediaFile)
class MediaFileAdmin(admin.ModelAdmin):
    list_display = ("file_name", "file_type", "file_size_kb", "uploaded_by", "created_at")
    search_fields = ("file_name", "file_type")
    list_filter = ("file_type",)
