from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import MediaFile

User = get_user_model()


class MediaFileSerializer(serializers.ModelSerializer):
    file_name = serializers.CharField(min_length=1, max_length=255)
    file_type = serializers.CharField(min_length=1, max_length=100)
    file_size_kb = serializers.IntegerField(min_value=0)
    uploaded_by_user_id = serializers.PrimaryKeyRelatedField(
        source="uploaded_by",
        queryset=User.objects.all(),
        required=False,
    )
    uploaded_by = serializers.SerializerMethodField()

    class Meta:
        model = MediaFile
        fields = [
            "id",
            "file_name",
            "file_url",
            "file_type",
            "file_size_kb",
            "uploaded_by_user_id",
            "uploaded_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_uploaded_by(self, obj):
        user = obj.uploaded_by
        if user is None:
            return {"name": None, "email": None, "role": None}
        return {"name": user.name, "email": user.email, "role": user.role}
