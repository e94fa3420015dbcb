from datetime import timedelta

import pytest
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone

from common.realtime import broker
from events.models import Event, EventRegistration
from organization.models import Antenne, ExecutiveMember, Partner


def _antenne(city="Rabat", **extra):
    return Antenne.objects.create(city=city, responsable="Responsable", email=f"{city.lower()}@uesgm.ma", **extra)


@pytest.mark.django_db
def test_partner_crud_and_notification(admin_client, api_client):
    sub = broker.subscribe({"partners"})

    # 1) Creation
    r = admin_client.post(reverse("admin_partners_list"),
                          {"name": "AMCI", "type": "INSTITUTIONAL", "website": "https://amci.ma"}, format="json")
    assert r.status_code == 201, r.content
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Partenaire créé avec succès"
    partner_id = body["data"]["id"]

    message = sub.get(timeout=1)
    assert message["type"] == "partner:created"
    assert message["payload"]["id"] == partner_id

    # 2) Visible publiquement
    r = api_client.get(reverse("partners_list"))
    assert [p["name"] for p in r.json()["data"]] == ["AMCI"]

    # 3) Doublon -> 409
    r = admin_client.post(reverse("admin_partners_list"), {"name": "amci"}, format="json")
    assert r.status_code == 409
    assert r.json() == {"error": "Un partenaire avec ce nom existe déjà"}

    # 4) Mise a jour
    r = admin_client.patch(reverse("admin_partners_detail", args=[partner_id]), {"order": 3}, format="json")
    assert r.status_code == 200
    assert r.json()["data"]["order"] == 3
    assert sub.get(timeout=1)["type"] == "partner:updated"

    # 5) Suppression puis 404
    r = admin_client.delete(reverse("admin_partners_detail", args=[partner_id]))
    assert r.status_code == 200
    assert sub.get(timeout=1)["type"] == "partner:deleted"
    r = admin_client.delete(reverse("admin_partners_detail", args=[partner_id]))
    assert r.status_code == 404
    assert not Partner.objects.exists()


@pytest.mark.django_db
def test_invalid_partner_is_rejected_without_side_effects(admin_client):
    sub = broker.subscribe()
    r = admin_client.post(reverse("admin_partners_list"), {"name": "A", "website": "pas-une-url"}, format="json")
    assert r.status_code == 400
    assert set(r.json()["details"]) == {"name", "website"}
    assert Partner.objects.count() == 0
    assert sub.get(timeout=0.05) is None


@pytest.mark.django_db
def test_partner_admin_requires_admin_role(api_client, member_client):
    payload = {"name": "Campus Connect"}
    assert api_client.post(reverse("admin_partners_list"), payload, format="json").status_code == 401
    assert member_client.post(reverse("admin_partners_list"), payload, format="json").status_code == 403
    assert Partner.objects.count() == 0


@pytest.mark.django_db
def test_partner_type_filter(api_client):
    Partner.objects.create(name="AMCI", type=Partner.Type.INSTITUTIONAL)
    Partner.objects.create(name="Banque", type=Partner.Type.PRIVATE)
    r = api_client.get(reverse("partners_list"), {"type": "private"})
    assert [p["name"] for p in r.json()["data"]] == ["Banque"]


@pytest.mark.django_db
def test_antenne_creation_and_unique_city(admin_client):
    r = admin_client.post(reverse("admin_antennes_list"),
                          {"city": "Fès", "responsable": "Ondo", "email": "FES@uesgm.ma", "phone": "+212 6 00 00 00"},
                          format="json")
    assert r.status_code == 201, r.content
    assert r.json()["data"]["name"] == "Antenne de Fès"
    assert r.json()["data"]["email"] == "fes@uesgm.ma"

    r = admin_client.post(reverse("admin_antennes_list"),
                          {"city": "fès", "responsable": "Autre", "email": "autre@uesgm.ma"}, format="json")
    assert r.status_code == 409

    r = admin_client.post(reverse("admin_antennes_list"),
                          {"city": "Oujda", "responsable": "X Y", "email": "o@uesgm.ma", "phone": "abc"},
                          format="json")
    assert r.status_code == 400
    assert "phone" in r.json()["details"]


@pytest.mark.django_db
def test_antenne_search(api_client):
    _antenne("Rabat")
    _antenne("Casablanca")
    _antenne("Marrakech")

    r = api_client.get(reverse("antennes_search"), {"q": "casa"})
    assert [a["city"] for a in r.json()["data"]] == ["Casablanca"]

    # moins de 2 caracteres -> toutes
    r = api_client.get(reverse("antennes_search"), {"q": "c"})
    assert r.json()["count"] == 3


@pytest.mark.django_db
def test_antenne_stats(api_client):
    rabat = _antenne("Rabat")
    now = timezone.now()
    upcoming = Event.objects.create(title="Gala de Rabat", slug="gala-de-rabat", description="Soirée de gala",
                                    start_date=now + timedelta(days=10), status=Event.Status.PUBLISHED,
                                    antenne=rabat)
    Event.objects.create(title="Accueil", slug="accueil", description="Journée d'accueil",
                         start_date=now - timedelta(days=10), status=Event.Status.PUBLISHED, antenne=rabat)
    Event.objects.create(title="Brouillon", slug="brouillon", description="Pas encore publié",
                         start_date=now + timedelta(days=5), antenne=rabat)
    EventRegistration.objects.create(event=upcoming, name="Ada", email="ada@example.com")

    r = api_client.get(reverse("antennes_stats", args=["rabat"]))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["eventsTotal"] == 2
    assert data["upcomingEvents"] == 1
    assert data["pastEvents"] == 1
    assert data["registrations"] == 1
    assert [e["slug"] for e in data["nextEvents"]] == ["gala-de-rabat"]

    assert api_client.get(reverse("antennes_stats", args=["Tanger"])).status_code == 404


@pytest.mark.django_db
def test_executive_members_only_active_are_public(admin_client, api_client):
    ExecutiveMember.objects.create(name="Ancien", position="Trésorier", is_active=False)
    r = admin_client.post(reverse("admin_executive_members_list"),
                          {"name": "Mba Obiang", "position": "Président", "order": 1}, format="json")
    assert r.status_code == 201, r.content

    r = api_client.get(reverse("executive_members_list"))
    assert [m["name"] for m in r.json()["data"]] == ["Mba Obiang"]

    r = admin_client.get(reverse("admin_executive_members_list"))
    assert r.json()["pagination"]["total"] == 2


@pytest.mark.django_db
def test_load_demo_command():
    call_command("load_demo", events=4, seed=1)
    assert Antenne.objects.count() == 8
    assert Event.objects.count() == 4
    assert Partner.objects.exists()

    # idempotent pour les referentiels
    call_command("load_demo", events=0)
    assert Antenne.objects.count() == 8
