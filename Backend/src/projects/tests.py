import pytest
from django.urls import reverse

from common.realtime import broker
from projects.models import Project

PROJECT_PAYLOAD = {
    "title": "Tutorat des nouveaux bacheliers",
    "description": "Accompagnement académique des nouveaux étudiants par des aînés de chaque antenne.",
    "category": "EDUCATION",
    "status": "IN_PROGRESS",
    "progress": 40,
    "city": "Rabat",
    "startDate": "2025-09-01",
    "isPublished": True,
}


def _project(title, **extra):
    from common.utils import unique_slug

    extra.setdefault("is_published", True)
    return Project.objects.create(title=title, slug=unique_slug(Project, title),
                                  description="Description suffisamment longue du projet.", **extra)


@pytest.mark.django_db
def test_create_project_and_public_detail(admin_client, api_client):
    sub = broker.subscribe({"projects"})
    r = admin_client.post(reverse("admin_projects_list"), PROJECT_PAYLOAD, format="json")
    assert r.status_code == 201, r.content
    data = r.json()["data"]
    assert data["slug"] == "tutorat-des-nouveaux-bacheliers"
    assert data["shortDesc"].startswith("Accompagnement académique")
    assert data["publishedAt"] is not None
    assert sub.get(timeout=1)["type"] == "project:created"

    r = api_client.get(reverse("projects_detail", args=[data["slug"]]))
    assert r.status_code == 200
    assert r.json()["data"]["progress"] == 40


@pytest.mark.django_db
def test_project_validation(admin_client):
    r = admin_client.post(reverse("admin_projects_list"), {**PROJECT_PAYLOAD, "progress": 150}, format="json")
    assert r.status_code == 400
    assert "progress" in r.json()["details"]

    r = admin_client.post(reverse("admin_projects_list"),
                          {**PROJECT_PAYLOAD, "startDate": "2025-09-01", "endDate": "2025-01-01"}, format="json")
    assert r.status_code == 400
    assert "endDate" in r.json()["details"]

    _project("Tutorat des nouveaux bacheliers")
    r = admin_client.post(reverse("admin_projects_list"), PROJECT_PAYLOAD, format="json")
    assert r.status_code == 409
    assert r.json() == {"error": "Un projet avec ce titre existe déjà"}


@pytest.mark.django_db
def test_public_list_filters(api_client):
    _project("Caravane santé", category=Project.Category.HEALTH, city="Fès", is_featured=True)
    _project("Bibliothèque numérique", category=Project.Category.DIGITAL, city="Rabat")
    _project("Projet caché", is_published=False)

    r = api_client.get(reverse("projects_list"))
    assert r.json()["pagination"]["total"] == 2

    r = api_client.get(reverse("projects_list"), {"featured": "true"})
    assert [p["title"] for p in r.json()["data"]] == ["Caravane santé"]

    r = api_client.get(reverse("projects_list"), {"category": "digital", "city": "rabat"})
    assert [p["title"] for p in r.json()["data"]] == ["Bibliothèque numérique"]


@pytest.mark.django_db
def test_unpublish_hides_project(admin_client, api_client):
    project = _project("Collecte de fournitures")
    assert api_client.get(reverse("projects_detail", args=[project.slug])).status_code == 200

    r = admin_client.patch(reverse("admin_projects_detail", args=[project.pk]), {"isPublished": False},
                           format="json")
    assert r.status_code == 200, r.content
    assert r.json()["data"]["publishedAt"] is None
    assert api_client.get(reverse("projects_detail", args=[project.slug])).status_code == 404


@pytest.mark.django_db
def test_only_super_admin_deletes_projects(admin_client, super_admin_client):
    project = _project("Collecte de fournitures")
    url = reverse("admin_projects_detail", args=[project.pk])

    r = admin_client.delete(url)
    assert r.status_code == 403
    assert r.json() == {"error": "Seul un super administrateur peut supprimer un projet"}

    sub = broker.subscribe({"projects"})
    assert super_admin_client.delete(url).status_code == 200
    assert sub.get(timeout=1)["type"] == "project:deleted"
    assert super_admin_client.delete(url).status_code == 404
