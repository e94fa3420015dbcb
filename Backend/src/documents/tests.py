import pytest
from django.urls import reverse

from common.realtime import broker
from documents.models import Document, DocumentVersion


def _document(title, visibility=Document.Visibility.PUBLIC, published=True, **extra):
    from common.utils import unique_slug

    return Document.objects.create(
        title=title,
        slug=unique_slug(Document, title),
        file_url="https://cdn.uesgm.ma/documents/fichier.pdf",
        visibility=visibility,
        is_published=published,
        **extra,
    )


DOCUMENT_PAYLOAD = {
    "title": "Statuts de l'association",
    "description": "Statuts adoptés en assemblée générale",
    "fileUrl": "https://cdn.uesgm.ma/documents/2025/doc-statuts.pdf",
    "fileName": "statuts.pdf",
    "fileSize": 120000,
    "mimeType": "application/pdf",
    "category": "STATUTS",
    "tags": ["statuts", "officiel", "statuts"],
}


@pytest.mark.django_db
def test_create_document_then_visible_when_published(admin_client, api_client):
    sub = broker.subscribe({"documents"})

    r = admin_client.post(reverse("admin_documents_list"), DOCUMENT_PAYLOAD, format="json")
    assert r.status_code == 201, r.content
    data = r.json()["data"]
    assert data["slug"] == "statuts-de-lassociation"
    assert data["tags"] == ["officiel", "statuts"]
    assert data["version"] == 1
    assert data["isPublished"] is False
    assert sub.get(timeout=1)["type"] == "document:created"
    assert DocumentVersion.objects.filter(document_id=data["id"], version=1).exists()

    # non publie -> invisible publiquement
    assert api_client.get(reverse("documents_detail", args=[data["slug"]])).status_code == 404

    r = admin_client.post(reverse("admin_documents_publish", args=[data["id"]]), {}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["data"]["isPublished"] is True
    assert r.json()["data"]["publishedAt"] is not None
    assert sub.get(timeout=1)["type"] == "document:published"

    r = api_client.get(reverse("documents_detail", args=[data["slug"]]))
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Statuts de l'association"

    # bascule inverse -> depublie, la page publique est revalidee
    r = admin_client.patch(reverse("admin_documents_publish", args=[data["id"]]), {"isPublished": False},
                           format="json")
    assert r.status_code == 200
    assert sub.get(timeout=1)["type"] == "document:unpublished"
    assert api_client.get(reverse("documents_detail", args=[data["slug"]])).status_code == 404


@pytest.mark.django_db
def test_invalid_document_is_rejected(admin_client):
    payload = {**DOCUMENT_PAYLOAD, "title": "ab", "fileUrl": "pas une url", "tags": ["x"] * 21}
    r = admin_client.post(reverse("admin_documents_list"), payload, format="json")
    assert r.status_code == 400
    assert {"title", "fileUrl", "tags"} <= set(r.json()["details"])
    assert Document.objects.count() == 0


@pytest.mark.django_db
def test_visibility_by_role(api_client, member_client, admin_client):
    _document("Rapport public")
    _document("Compte rendu membres", visibility=Document.Visibility.MEMBERS_ONLY)
    _document("Note interne", visibility=Document.Visibility.ADMIN_ONLY)
    _document("Brouillon", published=False)

    def titles(client):
        return sorted(d["title"] for d in client.get(reverse("documents_list")).json()["data"])

    assert titles(api_client) == ["Rapport public"]
    assert titles(member_client) == ["Compte rendu membres", "Rapport public"]
    assert titles(admin_client) == ["Brouillon", "Compte rendu membres", "Note interne", "Rapport public"]


@pytest.mark.django_db
def test_list_filters(api_client):
    doc = _document("Guide de l'étudiant", category=Document.Category.GUIDE)
    doc.tags.create(name="orientation")
    _document("Rapport annuel", category=Document.Category.RAPPORT)

    r = api_client.get(reverse("documents_list"), {"category": "guide"})
    assert [d["title"] for d in r.json()["data"]] == ["Guide de l'étudiant"]

    r = api_client.get(reverse("documents_list"), {"tag": "orientation"})
    assert r.json()["pagination"]["total"] == 1

    r = api_client.get(reverse("documents_list"), {"search": "annuel"})
    assert [d["title"] for d in r.json()["data"]] == ["Rapport annuel"]


@pytest.mark.django_db
def test_download_counter_and_restriction(api_client):
    doc = _document("Rapport public")
    locked = _document("Consultation seule", can_download=False)

    r = api_client.post(reverse("documents_download", args=[doc.slug]))
    assert r.status_code == 200
    assert r.json()["data"]["downloads"] == 1
    api_client.post(reverse("documents_download", args=[doc.slug]))
    doc.refresh_from_db()
    assert doc.downloads == 2

    r = api_client.get(reverse("documents_detail", args=[locked.slug]))
    assert r.json()["data"]["fileUrl"] is None
    r = api_client.post(reverse("documents_download", args=[locked.slug]))
    assert r.status_code == 403
    assert r.json() == {"error": "Téléchargement non autorisé pour ce document"}


@pytest.mark.django_db
def test_new_version_keeps_history(admin_client):
    doc = _document("Règlement intérieur")
    DocumentVersion.objects.create(document=doc, version=1, file_url=doc.file_url)

    r = admin_client.post(reverse("admin_documents_new_version", args=[doc.pk]),
                          {"fileUrl": "https://cdn.uesgm.ma/documents/v2.pdf", "note": "Révision 2025"},
                          format="json")
    assert r.status_code == 201, r.content
    data = r.json()["data"]
    assert data["version"] == 2
    assert data["fileUrl"] == "https://cdn.uesgm.ma/documents/v2.pdf"
    assert [v["version"] for v in data["versions"]] == [2, 1]

    r = admin_client.get(reverse("admin_documents_detail", args=[doc.pk]))
    assert len(r.json()["data"]["versions"]) == 2

    r = admin_client.post(reverse("admin_documents_new_version", args=[9999]),
                          {"fileUrl": "https://cdn.uesgm.ma/x.pdf"}, format="json")
    assert r.status_code == 404


@pytest.mark.django_db
def test_update_and_delete_document(admin_client):
    doc = _document("Ancien titre")
    r = admin_client.patch(reverse("admin_documents_detail", args=[doc.pk]),
                           {"title": "Nouveau titre", "tags": ["a", "b"]}, format="json")
    assert r.status_code == 200, r.content
    assert r.json()["data"]["tags"] == ["a", "b"]

    assert admin_client.delete(reverse("admin_documents_detail", args=[doc.pk])).status_code == 200
    assert admin_client.delete(reverse("admin_documents_detail", args=[doc.pk])).status_code == 404
