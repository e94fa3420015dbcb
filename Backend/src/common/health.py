import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health(request):
    """
    Endpoint de sante.
    GET /api/common/health -> {"status":"ok","service":"uesgm-api","database":"ok"}
    503 si la base ne repond pas.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        database = "ok"
    except DatabaseError as e:
        logger.error(f"[health] base de donnees indisponible: {e}")
        database = "error"

    status = "ok" if database == "ok" else "degraded"
    return JsonResponse(
        {"status": status, "service": "uesgm-api", "database": database},
        status=200 if database == "ok" else 503,
    )
