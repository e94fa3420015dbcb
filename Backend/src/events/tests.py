from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from common.realtime import broker
from events.models import Event, EventRegistration
from events.services import InvalidStatusChange, apply_status, publish_due_events
from events.tasks import publish_scheduled_events
from organization.models import Antenne


def _future(days=10):
    return timezone.now() + timedelta(days=days)


def _event(title="Soirée culturelle", status=Event.Status.PUBLISHED, start=None, **extra):
    from common.utils import unique_slug

    return Event.objects.create(
        title=title,
        slug=unique_slug(Event, title),
        description="Une soirée pour découvrir la culture gabonaise",
        start_date=start or _future(),
        status=status,
        **extra,
    )


def _payload(**overrides):
    payload = {
        "title": "Journée d'intégration 2025",
        "description": "Accueil des nouveaux étudiants gabonais à Rabat",
        "location": "Rabat",
        "category": "INTEGRATION",
        "startDate": _future().isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
def test_admin_creates_event_then_public_detail(admin_client, api_client):
    sub = broker.subscribe({"events"})

    r = admin_client.post(reverse("admin_events_list"), _payload(publishMode="NOW"), format="json")
    assert r.status_code == 201, r.content
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Événement créé avec succès"
    event = body["data"]
    assert event["status"] == "PUBLISHED"
    assert event["slug"] == "journee-dintegration-2025"
    assert event["publishedAt"] is not None

    message = sub.get(timeout=1)
    assert message["type"] == "event:created"
    assert message["payload"]["id"] == event["id"]

    r = api_client.get(reverse("events_detail", args=[event["slug"]]))
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Journée d'intégration 2025"

    # lookup par id aussi
    assert api_client.get(reverse("events_detail", args=[str(event["id"])])).status_code == 200


@pytest.mark.django_db
def test_invalid_event_is_rejected(admin_client):
    sub = broker.subscribe()
    past = (timezone.now() - timedelta(days=1)).isoformat()
    r = admin_client.post(reverse("admin_events_list"), _payload(title="Bal", startDate=past), format="json")
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Données invalides"
    assert {"title", "startDate"} <= set(body["details"])
    assert Event.objects.count() == 0
    assert sub.get(timeout=0.05) is None


@pytest.mark.django_db
def test_end_date_before_start_is_rejected(admin_client):
    start = _future(5)
    r = admin_client.post(reverse("admin_events_list"),
                          _payload(startDate=start.isoformat(), endDate=(start - timedelta(hours=2)).isoformat()),
                          format="json")
    assert r.status_code == 400
    assert "endDate" in r.json()["details"]


@pytest.mark.django_db
def test_event_admin_permissions(api_client, member_client):
    assert api_client.post(reverse("admin_events_list"), _payload(), format="json").status_code == 401
    assert member_client.post(reverse("admin_events_list"), _payload(), format="json").status_code == 403
    assert Event.objects.count() == 0


@pytest.mark.django_db
def test_delete_twice_returns_404(admin_client):
    event = _event()
    url = reverse("admin_events_detail", args=[event.pk])
    r = admin_client.delete(url)
    assert r.status_code == 200
    assert r.json()["message"] == "Événement supprimé avec succès"
    assert admin_client.delete(url).status_code == 404


@pytest.mark.django_db
def test_delete_with_registrations_is_refused(admin_client):
    event = _event()
    EventRegistration.objects.create(event=event, name="Ada", email="ada@example.com")
    r = admin_client.delete(reverse("admin_events_detail", args=[event.pk]))
    assert r.status_code == 409
    assert Event.objects.filter(pk=event.pk).exists()


@pytest.mark.django_db
def test_draft_is_hidden_until_published(admin_client, api_client):
    r = admin_client.post(reverse("admin_events_list"), _payload(), format="json")
    assert r.status_code == 201, r.content
    event = r.json()["data"]
    assert event["status"] == "DRAFT"

    assert api_client.get(reverse("events_list")).json()["pagination"]["total"] == 0
    assert api_client.get(reverse("events_detail", args=[event["slug"]])).status_code == 404

    sub = broker.subscribe({"events"})
    r = admin_client.patch(reverse("admin_events_status", args=[event["id"]]), {"status": "PUBLISHED"},
                           format="json")
    assert r.status_code == 200, r.content
    assert sub.get(timeout=1)["type"] == "event:published"

    # la liste publique a ete revalidee
    assert api_client.get(reverse("events_list")).json()["pagination"]["total"] == 1
    assert api_client.get(reverse("events_detail", args=[event["slug"]])).status_code == 200

    r = admin_client.patch(reverse("admin_events_status", args=[event["id"]]), {"status": "DRAFT"},
                           format="json")
    assert r.status_code == 200
    assert r.json()["data"]["publishedAt"] is None
    assert sub.get(timeout=1)["type"] == "event:unpublished"
    assert api_client.get(reverse("events_detail", args=[event["slug"]])).status_code == 404


@pytest.mark.django_db
def test_status_transitions_are_checked(admin_client):
    archived = _event(status=Event.Status.ARCHIVED)
    r = admin_client.patch(reverse("admin_events_status", args=[archived.pk]), {"status": "PUBLISHED"},
                           format="json")
    assert r.status_code == 400
    assert "ARCHIVED -> PUBLISHED" in r.json()["error"]

    past_draft = _event("Ancien", status=Event.Status.DRAFT, start=timezone.now() - timedelta(days=3))
    with pytest.raises(InvalidStatusChange):
        apply_status(past_draft, Event.Status.PUBLISHED)

    r = admin_client.patch(reverse("admin_events_status", args=[9999]), {"status": "DRAFT"}, format="json")
    assert r.status_code == 404


@pytest.mark.django_db
def test_public_list_periods_and_filters(api_client):
    _event("Gala", category=Event.Category.CULTURAL)
    _event("Conférence", category=Event.Category.ACADEMIC, start=_future(20))
    _event("Accueil", start=timezone.now() - timedelta(days=5))
    _event("Brouillon", status=Event.Status.DRAFT)

    r = api_client.get(reverse("events_list"))
    assert [e["title"] for e in r.json()["data"]] == ["Gala", "Conférence"]

    r = api_client.get(reverse("events_list"), {"status": "past"})
    assert [e["title"] for e in r.json()["data"]] == ["Accueil"]

    r = api_client.get(reverse("events_list"), {"status": "all", "category": "academic"})
    assert [e["title"] for e in r.json()["data"]] == ["Conférence"]

    r = api_client.get(reverse("events_list"), {"status": "hier"})
    assert r.status_code == 400


@pytest.mark.django_db
def test_registration_flow(api_client):
    event = _event(max_attendees=1)
    url = reverse("events_register", args=[event.pk])

    r = api_client.post(url, {"name": "Ada Ndong", "email": "Ada@Example.com"}, format="json")
    assert r.status_code == 201, r.content
    assert r.json()["message"] == "Inscription réussie !"

    r = api_client.post(url, {"name": "Ada Ndong", "email": "ada@example.com"}, format="json")
    assert r.status_code == 409

    r = api_client.post(url, {"name": "Paul", "email": "paul@example.com"}, format="json")
    assert r.status_code == 409
    assert r.json() == {"error": "Cet événement est complet"}

    r = api_client.get(reverse("events_detail", args=[event.slug]))
    assert r.json()["data"]["spotsLeft"] == 0

    assert api_client.delete(url).status_code == 400
    assert api_client.delete(f"{url}?email=inconnu@example.com").status_code == 404
    r = api_client.delete(f"{url}?email=ada@example.com")
    assert r.status_code == 200
    assert not EventRegistration.objects.exists()


@pytest.mark.django_db
def test_registration_refused_for_past_or_unpublished_events(api_client):
    past = _event("Passé", start=timezone.now() - timedelta(days=1))
    draft = _event("Brouillon", status=Event.Status.DRAFT)
    payload = {"name": "Ada", "email": "ada@example.com"}

    assert api_client.post(reverse("events_register", args=[past.pk]), payload, format="json").status_code == 400
    r = api_client.post(reverse("events_register", args=[draft.pk]), payload, format="json")
    assert r.status_code == 404
    assert r.json() == {"error": "Événement non trouvé"}


@pytest.mark.django_db
def test_admin_lists_registrations(admin_client):
    event = _event()
    EventRegistration.objects.create(event=event, name="Ada", email="ada@example.com")
    r = admin_client.get(reverse("admin_events_registrations", args=[event.pk]))
    assert r.status_code == 200
    assert [reg["email"] for reg in r.json()["data"]] == ["ada@example.com"]


@pytest.mark.django_db
def test_scheduled_creation_requires_future_publication(admin_client):
    r = admin_client.post(reverse("admin_events_list"), _payload(publishMode="SCHEDULED"), format="json")
    assert r.status_code == 400
    assert "publishedAt" in r.json()["details"]

    r = admin_client.post(reverse("admin_events_list"),
                          _payload(publishMode="SCHEDULED", publishedAt=_future(1).isoformat()), format="json")
    assert r.status_code == 201, r.content
    assert r.json()["data"]["status"] == "SCHEDULED"


@pytest.mark.django_db
def test_publish_scheduled_endpoint(admin_client, api_client):
    due = _event("Programmé", status=Event.Status.SCHEDULED, published_at=timezone.now() - timedelta(minutes=1))
    _event("Plus tard", status=Event.Status.SCHEDULED, published_at=_future(2))

    r = admin_client.get(reverse("admin_events_publish_scheduled"))
    assert r.status_code == 200
    assert r.json()["data"]["readyCount"] == 1
    assert len(r.json()["data"]["scheduled"]) == 2

    sub = broker.subscribe({"events"})
    r = admin_client.post(reverse("admin_events_publish_scheduled"))
    assert r.status_code == 200
    assert r.json()["data"]["published"] == 1
    assert sub.get(timeout=1)["type"] == "event:published"

    due.refresh_from_db()
    assert due.status == Event.Status.PUBLISHED
    assert api_client.get(reverse("events_detail", args=[due.slug])).status_code == 200


@pytest.mark.django_db
def test_publish_scheduled_task():
    _event("Programmé", status=Event.Status.SCHEDULED, published_at=timezone.now() - timedelta(minutes=1))
    assert publish_scheduled_events.delay().get() == 1
    assert publish_due_events() == []


@pytest.mark.django_db
def test_unpublished_event_is_hidden_by_id_too(admin_client, api_client):
    event = _event("Conférence santé")
    by_id = reverse("events_detail", args=[str(event.pk)])
    by_slug = reverse("events_detail", args=[event.slug])
    assert api_client.get(by_id).status_code == 200
    assert api_client.get(by_slug).status_code == 200

    r = admin_client.patch(reverse("admin_events_status", args=[event.pk]), {"status": "DRAFT"}, format="json")
    assert r.status_code == 200

    assert api_client.get(by_id).status_code == 404
    assert api_client.get(by_slug).status_code == 404


@pytest.mark.django_db
def test_event_changes_refresh_antenne_stats(admin_client, api_client):
    rabat = Antenne.objects.create(city="Rabat", responsable="Responsable", email="rabat@uesgm.ma")
    event = _event("Gala de Rabat", antenne=rabat)

    def events_total(city):
        r = api_client.get(reverse("antennes_stats", args=[city]))
        assert r.status_code == 200
        return r.json()["data"]["eventsTotal"]

    assert events_total("rabat") == 1
    assert events_total("Rabat") == 1

    r = admin_client.patch(reverse("admin_events_status", args=[event.pk]), {"status": "DRAFT"}, format="json")
    assert r.status_code == 200
    assert events_total("rabat") == 0
    assert events_total("Rabat") == 0

    r = admin_client.post(reverse("admin_events_list"),
                          _payload(title="Forum de Rabat", publishMode="NOW", antenne=rabat.pk), format="json")
    assert r.status_code == 201, r.content
    assert events_total("rabat") == 1


@pytest.mark.django_db
def test_scheduled_event_already_started_is_archived():
    now = timezone.now()
    late = _event("Programmé trop tard", status=Event.Status.SCHEDULED,
                  start=now - timedelta(hours=1), published_at=now - timedelta(minutes=5))
    on_time = _event("Programmé", status=Event.Status.SCHEDULED, published_at=now - timedelta(minutes=5))

    sub = broker.subscribe({"events"})
    assert publish_due_events() == [on_time]

    late.refresh_from_db()
    assert late.status == Event.Status.ARCHIVED
    types = {sub.get(timeout=1)["type"], sub.get(timeout=1)["type"]}
    assert types == {"event:archived", "event:published"}
