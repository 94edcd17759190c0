# apps/notifications/views.py
from rest_framework import permissions, views

from apps.accounts.permissions import IsAdmin
from apps.utils.responses import success_response

from .serializers import NotificationSerializer
from .services import NotificationService


class NotificationListView(views.APIView):
    """
    GET  /api/notifications   own + broadcast, newest first
    POST /api/notifications   admin only
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get(self, request):
        notifications = NotificationService.feed(request.user)
        return success_response(NotificationSerializer(notifications, many=True).data)

    def post(self, request):
        serializer = NotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        notification = NotificationService.create(**serializer.validated_data)
        return success_response(
            NotificationSerializer(notification).data,
            message="Notification created successfully",
        )


class NotificationMarkReadView(views.APIView):
    """
    PUT /api/notifications/<id>/read
    PUT /api/notifications/read-all
    """

    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, pk=None):
        if pk == "read-all":
            updated = NotificationService.mark_all_read(request.user)
            return success_response({"updated": updated})

        notification = NotificationService.mark_read(request.user, pk)
        return success_response(NotificationSerializer(notification).data)
