from django.urls import path
from .health import health
from .views import PingView, InfoView
from .sse import EventStreamView

urlpatterns = [
    path("common/health", health, name="health"),
    path("common/ping", PingView.as_view(), name="ping"),
    path("common/info", InfoView.as_view(), name="info"),

    # Flux temps reel du back-office
    path("sse/<str:channel>/", EventStreamView.as_view(), name="sse_stream"),
]
