# apps/analytics/views.py
from rest_framework import permissions
from rest_framework.views import APIView

from apps.accounts.permissions import IsAdmin
from apps.utils.responses import success_response
from .services import ActivityService, DashboardService


class DashboardStatsView(APIView):
    """
    GET /api/dashboard/stats
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        return success_response(DashboardService.admin_stats())


class RecentActivityView(APIView):
    """
    GET /api/dashboard/activity
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        return success_response(ActivityService.recent())


class CustomerDashboardView(APIView):
    """
    GET /api/dashboard/customer
    Summary for whoever holds the token.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return success_response(DashboardService.customer_summary(request.user))
