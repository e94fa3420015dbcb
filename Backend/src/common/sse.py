import json
import logging

from django.conf import settings
from django.http import StreamingHttpResponse
from rest_framework.exceptions import NotFound
from rest_framework.renderers import BaseRenderer, JSONRenderer
from rest_framework.views import APIView

from users.permissions import IsAdminRole
from .realtime import ALL_CHANNELS, CHANNELS, broker, format_sse

logger = logging.getLogger(__name__)


class EventStreamRenderer(BaseRenderer):
    """Permet la negociation ``Accept: text/event-stream`` (les erreurs sortent en ligne data:)."""
    media_type = "text/event-stream"
    format = "sse"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        return f"data: {json.dumps(data, ensure_ascii=False)}\n\n".encode("utf-8")


def event_stream(subscription, heartbeat_seconds: float):
    """Genere le flux: commentaire de connexion, messages, ``: heartbeat`` periodique."""
    try:
        yield ": connected\n\n"
        while True:
            message = subscription.get(timeout=heartbeat_seconds)
            if message is None:
                yield ": heartbeat\n\n"
                continue
            yield format_sse(message)
    finally:
        broker.unsubscribe(subscription)


class EventStreamView(APIView):
    """
    GET /api/sse/<channel>/ -> text/event-stream des notifications d'administration.
    channel: events | documents | projects | partners | antennes | members | all
    """

    permission_classes = [IsAdminRole]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request, channel: str):
        if channel != ALL_CHANNELS and channel not in CHANNELS:
            raise NotFound(f"Canal inconnu: {channel}")

        subscription = broker.subscribe(None if channel == ALL_CHANNELS else {channel})
        response = StreamingHttpResponse(
            event_stream(subscription, settings.SSE_HEARTBEAT_SECONDS),
            content_type="text/event-stream",
        )
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response
