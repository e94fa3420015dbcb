import pytest
from django.db import IntegrityError
from django.urls import reverse
from django.utils import timezone
from rest_framework.exceptions import NotFound, Throttled, ValidationError

from common.cache import revalidate_path
from common.exceptions import custom_exception_handler
from common.realtime import broker, format_sse, build_message
from common.serializers import camelize, to_camel, to_snake
from common.throttling import FixedWindowRateThrottle
from common.utils import envelope, unique_slug
from events.models import Event
from organization.models import Partner


@pytest.mark.django_db
def test_health_and_ping(api_client):
    r = api_client.get(reverse("health"))
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "uesgm-api", "database": "ok"}

    r = api_client.get(reverse("ping"), HTTP_X_REQUEST_ID="abc-123")
    assert r.status_code == 200
    assert r.json()["pong"] is True
    assert r["X-Request-ID"] == "abc-123"


@pytest.mark.django_db
def test_request_id_is_generated_when_missing_or_invalid(api_client):
    r = api_client.get(reverse("ping"), HTTP_X_REQUEST_ID="pas valide !")
    assert r["X-Request-ID"] != "pas valide !"
    assert len(r["X-Request-ID"]) == 32


@pytest.mark.django_db
def test_info_reports_storage_and_subscribers(api_client):
    r = api_client.get(reverse("info"))
    assert r.status_code == 200
    assert r.json()["service"] == "uesgm-api"
    assert r.json()["storage"] == "local"
    assert r.json()["sseSubscribers"] == 0


# ----- Exceptions -----

def test_exception_handler_shapes():
    r = custom_exception_handler(ValidationError({"start_date": ["Requis."]}), {})
    assert r.status_code == 400
    assert r.data == {"error": "Données invalides", "details": {"startDate": ["Requis."]}}

    r = custom_exception_handler(NotFound(), {})
    assert r.status_code == 404
    assert r.data == {"error": "Ressource introuvable"}

    r = custom_exception_handler(IntegrityError("UNIQUE constraint failed"), {})
    assert r.status_code == 409

    r = custom_exception_handler(Throttled(wait=42), {})
    assert r.status_code == 429
    assert r.data["retryAfter"] == 42


def test_exception_handler_hides_unexpected_errors(settings):
    settings.DEBUG = False
    r = custom_exception_handler(RuntimeError("boom"), {"view": None})
    assert r.status_code == 500
    assert r.data == {"error": "Erreur serveur"}


@pytest.mark.django_db
def test_anonymous_and_member_are_refused_on_admin_routes(api_client, member_client):
    r = api_client.get(reverse("admin_partners_list"))
    assert r.status_code == 401
    assert r.json() == {"error": "Authentification requise"}

    r = member_client.get(reverse("admin_partners_list"))
    assert r.status_code == 403
    assert r.json() == {"error": "Accès refusé"}


# ----- Utilitaires -----

def test_case_conversion():
    assert to_camel("published_at") == "publishedAt"
    assert to_snake("isActive") == "is_active"
    assert camelize({"start_date": [{"max_attendees": 3}]}) == {"startDate": [{"maxAttendees": 3}]}


def test_envelope_drops_empty_keys():
    assert envelope(message="ok") == {"success": True, "message": "ok"}
    assert envelope([1], count=1) == {"success": True, "data": [1], "count": 1}


@pytest.mark.django_db
def test_unique_slug_appends_counter():
    Event.objects.create(title="Journée d'intégration", slug="journee-dintegration",
                         description="Accueil des nouveaux", start_date=timezone.now())
    assert unique_slug(Event, "Journée d'intégration") == "journee-dintegration-2"
    assert unique_slug(Event, "Gala annuel") == "gala-annuel"


def test_rate_parsing():
    throttle = FixedWindowRateThrottle.__new__(FixedWindowRateThrottle)
    assert throttle.parse_rate("5/15m") == (5, 900)
    assert throttle.parse_rate("20/day") == (20, 86400)
    assert throttle.parse_rate("30/min") == (30, 60)
    assert throttle.parse_rate(None) == (None, None)


# ----- Revalidation -----

@pytest.mark.django_db
def test_public_list_is_cached_until_revalidated(api_client):
    Partner.objects.create(name="Ambassade")
    url = reverse("partners_list")

    assert api_client.get(url).json()["count"] == 1

    Partner.objects.create(name="Campus France")
    assert api_client.get(url).json()["count"] == 1  # version en cache

    revalidate_path(url)
    assert api_client.get(url).json()["count"] == 2


@pytest.mark.django_db
def test_admin_write_revalidates_public_list(api_client, admin_client):
    url = reverse("partners_list")
    assert api_client.get(url).json()["count"] == 0

    r = admin_client.post(reverse("admin_partners_list"), {"name": "Campus France"}, format="json")
    assert r.status_code == 201, r.content
    assert api_client.get(url).json()["count"] == 1


# ----- SSE -----

def test_format_sse():
    text = format_sse(build_message("event:created", {"id": 1}))
    assert text.startswith("event: event:created\ndata: ")
    assert text.endswith("\n\n")


@pytest.mark.django_db
def test_sse_requires_admin(api_client, member_client, admin_client):
    assert api_client.get(reverse("sse_stream", args=["events"])).status_code == 401
    assert member_client.get(reverse("sse_stream", args=["events"])).status_code == 403
    assert admin_client.get(reverse("sse_stream", args=["inconnu"])).status_code == 404


@pytest.mark.django_db
def test_sse_stream_delivers_published_events(admin_client):
    r = admin_client.get(reverse("sse_stream", args=["events"]))
    assert r.status_code == 200
    assert r["Content-Type"].startswith("text/event-stream")
    assert r["Cache-Control"] == "no-cache"

    stream = iter(r.streaming_content)
    assert next(stream) == b": connected\n\n"
    assert broker.subscriber_count() == 1

    broker.publish("documents", "document:created", {"id": 9})  # autre canal
    broker.publish("events", "event:created", {"id": 7, "title": "Gala"})
    chunk = next(stream).decode()
    assert chunk.startswith("event: event:created\n")
    assert '"id": 7' in chunk

    assert next(stream) == b": heartbeat\n\n"

    r.close()
    assert broker.subscriber_count() == 0
