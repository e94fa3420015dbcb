import os

from django.conf import settings
from django.utils import timezone
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .realtime import broker


class PingView(APIView):
    """GET /api/common/ping -> {"pong": true, "time": ...}"""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"pong": True, "time": timezone.now(), "requestId": getattr(request, "request_id", None)})


class InfoView(APIView):
    """
    GET /api/common/info -> infos minimales d'environnement (non sensibles)
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({
            "service": "uesgm-api",
            "debug": bool(getattr(settings, "DEBUG", False)),
            "env": os.getenv("DJANGO_ENV", "local"),
            "storage": settings.OBJECT_STORAGE.get("BACKEND"),
            "sseSubscribers": broker.subscriber_count(),
        })
