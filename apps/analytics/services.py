# apps/analytics/services.py
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.catalog.models import Product
from apps.orders.models import Order
from apps.payments.models import PaymentMethod
from .models import ActivityLog

logger = logging.getLogger(__name__)

MONTHS_IN_SERIES = 6


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _aware_midnight(day: date):
    return timezone.make_aware(datetime.combine(day, time.min))


class ActivityService:

    @staticmethod
    def record(user, action: str, details: str = "") -> ActivityLog:
        return ActivityLog.objects.create(user=user, action=action, details=details)

    @staticmethod
    def recent(limit=None):
        limit = limit or getattr(settings, "ACTIVITY_FEED_LIMIT", 15)
        rows = ActivityLog.objects.select_related("user").order_by("-created_at")[:limit]
        return [
            {
                "id": str(row.id),
                "user": {
                    "id": str(row.user_id) if row.user_id else None,
                    "name": row.user.name if row.user else None,
                    "avatar_url": row.user.avatar_url if row.user else None,
                },
                "action": row.action,
                "details": row.details,
                "created_at": row.created_at,
            }
            for row in rows
        ]


class DashboardService:
    """
    Aggregates for the admin and customer dashboards.
    Monthly series always contain MONTHS_IN_SERIES points, zero-filled.
    """

    @staticmethod
    def _month_keys(today: date):
        first = _shift_month(_month_start(today), -(MONTHS_IN_SERIES - 1))
        return [_shift_month(first, i) for i in range(MONTHS_IN_SERIES)]

    @staticmethod
    def _monthly_series(queryset, value_expr, label: str, months):
        since = _aware_midnight(months[0])
        rows = (
            queryset.filter(created_at__gte=since)
            .annotate(month=TruncMonth("created_at"))
            .values("month")
            .annotate(value=value_expr)
        )
        by_month = {row["month"].strftime("%Y-%m"): row["value"] or 0 for row in rows}
        return [
            {"month": m.strftime("%Y-%m"), label: by_month.get(m.strftime("%Y-%m"), 0)}
            for m in months
        ]

    @staticmethod
    def _avg_completed(start, end=None):
        qs = Order.objects.filter(status=Order.Status.COMPLETED, created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lt=end)
        return qs.aggregate(v=Avg("total_amount"))["v"] or Decimal("0")

    @staticmethod
    def admin_stats():
        User = get_user_model()
        now = timezone.now()
        today = timezone.localdate()
        completed = Order.objects.filter(status=Order.Status.COMPLETED)

        this_month = _aware_midnight(_month_start(today))
        prev_month = _aware_midnight(_shift_month(_month_start(today), -1))
        aov_current = DashboardService._avg_completed(this_month)
        aov_prev = DashboardService._avg_completed(prev_month, this_month)
        aov_change = (
            float((aov_current - aov_prev) / aov_prev * 100) if aov_prev > 0 else 0.0
        )

        months = DashboardService._month_keys(today)
        top_products = (
            Product.objects.annotate(
                total_sold=Coalesce(
                    Sum("order_items__quantity", filter=Q(order_items__order__status=Order.Status.COMPLETED)),
                    0,
                )
            )
            .order_by("-total_sold", "name")
            .values("id", "name", "price", "total_sold")[:5]
        )

        return {
            "overview": {
                "totalUsers": User.objects.count(),
                "totalProducts": Product.objects.count(),
                "totalOrders": Order.objects.count(),
                "totalRevenue": completed.aggregate(v=Sum("total_amount"))["v"] or Decimal("0"),
                "recentOrders": Order.objects.filter(created_at__gte=now - timedelta(days=7)).count(),
                "lowStockProducts": Product.objects.filter(
                    stock_quantity__lte=settings.LOW_STOCK_THRESHOLD
                ).count(),
                "avgOrderValue": aov_current,
                "avgOrderValueChangePct": round(aov_change, 2),
            },
            "charts": {
                "monthlyRevenue": DashboardService._monthly_series(
                    completed, Sum("total_amount"), "revenue", months
                ),
                "monthlyOrders": DashboardService._monthly_series(
                    Order.objects.all(), Count("id"), "orders", months
                ),
                "monthlyUsers": DashboardService._monthly_series(
                    User.objects.all(), Count("id"), "users", months
                ),
                "topProducts": list(top_products),
            },
        }

    @staticmethod
    def customer_summary(user):
        orders = Order.objects.filter(user=user)
        recent = orders.order_by("-created_at")[:5]
        return {
            "totalOrders": orders.count(),
            "totalSpent": orders.filter(status=Order.Status.COMPLETED).aggregate(
                v=Sum("total_amount")
            )["v"] or Decimal("0"),
            "paymentMethodsCount": PaymentMethod.objects.filter(user=user).count(),
            "recentOrders": [
                {
                    "id": str(o.id),
                    "total_amount": o.total_amount,
                    "status": o.status,
                    "created_at": o.created_at,
                    "items_count": o.items.count(),
                }
                for o in recent
            ],
        }
