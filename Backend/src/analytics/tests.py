from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from analytics.services.statistics import growth_rate, monthly_series, safe_div, with_growth
from common.utils import unique_slug
from engagement.models import ContactMessage, NewsletterSubscriber
from events.models import Event
from projects.models import Project


def _event(title, status=Event.Status.PUBLISHED, days=10, **extra):
    return Event.objects.create(
        title=title,
        slug=unique_slug(Event, title),
        description="Rencontre des étudiants gabonais",
        start_date=timezone.now() + timedelta(days=days),
        status=status,
        **extra,
    )


@pytest.fixture
def activity(db):
    _event("Journée d'intégration")
    _event("Forum des métiers", category=Event.Category.ACADEMIC)
    _event("Brouillon", status=Event.Status.DRAFT)
    Project.objects.create(title="Tutorat", slug="tutorat", description="Soutien scolaire", is_published=True)
    Project.objects.create(title="Caravane", slug="caravane", description="Santé", is_published=False)
    NewsletterSubscriber.objects.create(email="a@uesgm.ma")
    NewsletterSubscriber.objects.create(email="b@uesgm.ma", is_active=False)
    old = ContactMessage.objects.create(name="Ada", email="ada@example.com", message="Bonjour à tous")
    ContactMessage.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=62))
    ContactMessage.objects.create(name="Bob", email="bob@example.com", message="Une question",
                                  status=ContactMessage.Status.SENT)


# ---------- calculs ----------

def test_growth_and_safe_div():
    assert safe_div(1, 0) == 0.0
    assert safe_div(6, 3) == 2
    assert growth_rate(15, 10) == 0.5
    assert growth_rate(5, 0) == 0.0
    assert growth_rate(5, -10) == 1.5


def test_monthly_series_fills_empty_months():
    now = timezone.now()
    series = monthly_series([now, now, None], months=3)
    assert len(series) == 3
    assert series[-1] == {"month": timezone.localtime(now).strftime("%Y-%m"), "count": 2}
    assert [p["count"] for p in series[:2]] == [0, 0]

    assert [p["count"] for p in monthly_series([], months=4)] == [0, 0, 0, 0]


def test_with_growth():
    result = with_growth([{"month": "2025-01", "count": 2}, {"month": "2025-02", "count": 4}])
    assert result["total"] == 6
    assert result["average"] == 3.0
    assert result["growth"] == 1.0


# ---------- API ----------

@pytest.mark.django_db
def test_public_overview(api_client, activity):
    r = api_client.get(reverse("statistics"))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["meta"]["isAdmin"] is False
    assert body["meta"]["detailed"] is False
    assert "detailed" not in body["data"]

    overview = body["data"]["overview"]
    assert overview["totalEvents"] == 3
    assert overview["publishedEvents"] == 2
    assert overview["upcomingEvents"] == 2
    assert overview["publishedProjects"] == 1

    engagement = body["data"]["engagement"]
    assert engagement["activeNewsletterSubscribers"] == 1
    assert engagement["totalContactMessages"] == 2
    assert engagement["unreadContactMessages"] == 1


@pytest.mark.django_db
def test_detailed_statistics_reserved_to_admins(api_client, member_client):
    url = reverse("statistics") + "?detailed=true"
    for client in (api_client, member_client):
        r = client.get(url)
        assert r.status_code == 403
        assert r.json() == {"error": "Statistiques détaillées réservées aux administrateurs"}


@pytest.mark.django_db
def test_detailed_statistics_for_admin(admin_client, activity):
    r = admin_client.get(reverse("statistics"), {"detailed": "true"})
    assert r.status_code == 200
    body = r.json()
    assert body["meta"]["isAdmin"] is True
    assert body["meta"]["detailed"] is True

    detailed = body["data"]["detailed"]
    categories = {row["key"]: row["count"] for row in detailed["breakdowns"]["eventsByCategory"]}
    assert categories == {Event.Category.INTEGRATION: 1, Event.Category.ACADEMIC: 1}

    monthly = detailed["monthly"]
    assert len(monthly["events"]["series"]) == 12
    months = {p["month"] for p in monthly["events"]["series"]}
    expected = sum(
        timezone.localtime(e.start_date).strftime("%Y-%m") in months
        for e in Event.objects.filter(status=Event.Status.PUBLISHED)
    )
    assert monthly["events"]["total"] == expected
    assert len(monthly["contactMessages"]["series"]) == 6
    assert monthly["contactMessages"]["total"] == 2
    assert monthly["newsletterSubscribers"]["total"] == 2

    # le message vieux de deux mois sort de la fenetre des 30 derniers jours
    recent = detailed["activity"]["recent"]
    assert [row["name"] for row in recent] == ["Bob"]


@pytest.mark.django_db
def test_public_statistics_are_cached(api_client, activity):
    first = api_client.get(reverse("statistics")).json()
    _event("Gala annuel")
    second = api_client.get(reverse("statistics")).json()
    assert second["data"]["overview"]["totalEvents"] == first["data"]["overview"]["totalEvents"]
