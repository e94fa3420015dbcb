import pytest
import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from integrations.storage import StorageError, SupabaseStorage, build_object_path, get_storage

PDF = b"%PDF-1.4 fichier de test"


def _pdf(name="rapport.pdf", content=PDF, content_type="application/pdf"):
    return SimpleUploadedFile(name, content, content_type=content_type)


@pytest.fixture
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


class FakeResponse:
    def __init__(self, status_code=200, text='{"Key": "documents/x"}'):
        self.status_code = status_code
        self.text = text


def test_object_path_format():
    path = build_object_path("Statuts UESGM.PDF", "application/pdf")
    parts = path.split("/")
    assert parts[0] == "documents"
    assert parts[1].isdigit()
    assert parts[2].startswith("doc-") and parts[2].endswith(".pdf")

    # extension absente -> deduite du type MIME
    assert build_object_path("photo", "image/png", "events").endswith(".png")


@pytest.mark.django_db
def test_upload_to_local_storage(admin_client, media_root):
    r = admin_client.post(reverse("admin_upload"), {"file": _pdf()}, format="multipart")
    assert r.status_code == 201, r.content
    data = r.json()["data"]
    assert data["fileName"] == "rapport.pdf"
    assert data["mimeType"] == "application/pdf"
    assert data["fileSize"] == len(PDF)
    assert data["fileUrl"].startswith("http://testserver/media/documents/")
    assert (media_root / data["filePath"]).read_bytes() == PDF


@pytest.mark.django_db
def test_upload_rejects_type_size_and_missing_file(admin_client, media_root, settings):
    r = admin_client.post(reverse("admin_upload"), {}, format="multipart")
    assert r.status_code == 400
    assert r.json() == {"error": "Aucun fichier fourni"}

    r = admin_client.post(reverse("admin_upload"),
                          {"file": _pdf("script.sh", b"echo", "application/x-sh")}, format="multipart")
    assert r.status_code == 400
    assert r.json() == {"error": "Type de fichier non autorisé"}

    settings.UPLOAD_MAX_IMAGE_BYTES = 10
    r = admin_client.post(reverse("admin_upload"),
                          {"file": _pdf("photo.png", b"x" * 11, "image/png")}, format="multipart")
    assert r.status_code == 400

    r = admin_client.post(reverse("admin_upload"), {"file": _pdf(), "folder": "../etc"}, format="multipart")
    assert r.status_code == 400


@pytest.mark.django_db
def test_upload_requires_admin(api_client, member_client):
    assert api_client.post(reverse("admin_upload"), {"file": _pdf()}, format="multipart").status_code == 401
    assert member_client.post(reverse("admin_upload"), {"file": _pdf()}, format="multipart").status_code == 403


@pytest.mark.django_db
def test_upload_to_supabase(admin_client, settings, monkeypatch):
    settings.OBJECT_STORAGE = {
        "BACKEND": "supabase",
        "SUPABASE_URL": "https://projet.supabase.co/",
        "SUPABASE_SERVICE_KEY": "service-key",
        "BUCKET": "documents",
        "TIMEOUT": 5,
    }
    calls = []

    def fake_post(url, data=None, timeout=None, headers=None):
        calls.append({"url": url, "data": data, "headers": headers})
        return FakeResponse()

    monkeypatch.setattr(requests, "post", fake_post)

    r = admin_client.post(reverse("admin_upload"), {"file": _pdf()}, format="multipart")
    assert r.status_code == 201, r.content
    data = r.json()["data"]
    assert data["fileUrl"] == f"https://projet.supabase.co/storage/v1/object/public/documents/{data['filePath']}"

    assert calls[0]["url"] == f"https://projet.supabase.co/storage/v1/object/documents/{data['filePath']}"
    assert calls[0]["data"] == PDF
    assert calls[0]["headers"]["Authorization"] == "Bearer service-key"
    assert calls[0]["headers"]["Content-Type"] == "application/pdf"


@pytest.mark.django_db
def test_storage_failure_returns_502(admin_client, settings, monkeypatch):
    settings.OBJECT_STORAGE = {"BACKEND": "supabase", "SUPABASE_URL": "https://projet.supabase.co",
                               "SUPABASE_SERVICE_KEY": "k", "BUCKET": "documents"}
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(500, "boom"))

    r = admin_client.post(reverse("admin_upload"), {"file": _pdf()}, format="multipart")
    assert r.status_code == 502
    assert r.json() == {"error": "Échec de l'upload (HTTP 500)"}


def test_storage_network_error(monkeypatch):
    def raise_timeout(*args, **kwargs):
        raise requests.exceptions.Timeout("trop long")

    monkeypatch.setattr(requests, "post", raise_timeout)
    storage = SupabaseStorage("https://projet.supabase.co", "k", "documents")
    with pytest.raises(StorageError):
        storage.save("documents/2025/doc.pdf", _pdf(), "application/pdf")


def test_storage_configuration_errors():
    with pytest.raises(StorageError):
        get_storage({"BACKEND": "supabase", "SUPABASE_URL": "", "SUPABASE_SERVICE_KEY": ""})
    with pytest.raises(StorageError):
        get_storage({"BACKEND": "ftp"})
