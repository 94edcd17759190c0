import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    status = {"db": "unknown", "cache": "unknown"}
    try:
        # Check DB
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        status["db"] = "ok"

        # Check cache backend (locmem or redis)
        cache.set("health:ping", "pong", timeout=5)
        status["cache"] = "ok" if cache.get("health:ping") == "pong" else "degraded"

        return JsonResponse({"success": True, "status": "ok", "components": status}, status=200)
    except (DatabaseError, ConnectionError) as exc:
        logger.error(f"Health check failed: {exc}")
        return JsonResponse(
            {"success": False, "status": "error", "components": status},
            status=503
        )
