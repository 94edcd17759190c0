# apps/analytics/urls.py
from django.urls import path

from .views import DashboardStatsView, RecentActivityView, CustomerDashboardView

urlpatterns = [
    path("dashboard/stats", DashboardStatsView.as_view(), name="dashboard-stats"),
    path("dashboard/activity", RecentActivityView.as_view(), name="dashboard-activity"),
    path("dashboard/customer", CustomerDashboardView.as_view(), name="dashboard-customer"),
]
