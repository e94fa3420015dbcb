from __future__ import annotations

import logging

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from common.cache import cached_public_response
from common.utils import query_bool
from users.models import Role
from users.permissions import request_has_role
from .services import statistics

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
def statistics_view(request):
    """
    GET /api/statistics/            -> compteurs publics (mis en cache pour les anonymes)
    GET /api/statistics/?detailed=true  -> + ventilations et series mensuelles (admin)
    """
    detailed = bool(query_bool(request.query_params.get("detailed")))
    is_admin = request_has_role(request, Role.ADMIN)
    if detailed and not is_admin:
        raise PermissionDenied("Statistiques détaillées réservées aux administrateurs")

    def build():
        data = statistics.overview()
        if detailed:
            data["detailed"] = statistics.detailed()
            logger.info(f"[statistics] statistiques detaillees demandees par user:{request.user.pk}")
        return Response({
            "success": True,
            "data": data,
            "meta": {
                "isAdmin": is_admin,
                "detailed": detailed,
                "generatedAt": timezone.now(),
            },
        })

    return cached_public_response(request, build)
