"""
Stockage objet des fichiers televerses par le back-office.

- "supabase": API REST Supabase Storage (requests), URL publique du bucket.
- "local": ``default_storage`` Django (MEDIA_ROOT), pour le dev et les tests.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone
from requests.exceptions import RequestException

__all__ = ["ALLOWED_MIME_TYPES", "IMAGE_MIME_TYPES", "StorageError", "StoredFile", "build_object_path",
           "get_storage", "max_size_for"]

logger = logging.getLogger(__name__)

# type MIME -> extension par defaut
ALLOWED_MIME_TYPES = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "text/plain": "txt",
}
IMAGE_MIME_TYPES = {m for m in ALLOWED_MIME_TYPES if m.startswith("image/")}

_RAND_ALPHABET = string.ascii_lowercase + string.digits


class StorageError(RuntimeError):
    """Erreur d'ecriture vers le stockage objet."""


@dataclass
class StoredFile:
    path: str
    url: str


def max_size_for(mime_type: str) -> int:
    if mime_type in IMAGE_MIME_TYPES:
        return settings.UPLOAD_MAX_IMAGE_BYTES
    return settings.UPLOAD_MAX_DOCUMENT_BYTES


def build_object_path(file_name: str, mime_type: str, folder: str = "documents") -> str:
    """documents/<annee>/doc-<timestamp ms>-<6 caracteres>.<ext>"""
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if not ext.isalnum() or len(ext) > 5:
        ext = ALLOWED_MIME_TYPES.get(mime_type, "bin")
    rand = "".join(secrets.choice(_RAND_ALPHABET) for _ in range(6))
    return f"{folder}/{timezone.now().year}/doc-{int(time.time() * 1000)}-{rand}.{ext}"


class LocalStorage:
    name = "local"

    def save(self, path: str, content, mime_type: str) -> StoredFile:
        try:
            saved = default_storage.save(path, content)
        except OSError as e:
            logger.error(f"[storage] ecriture locale impossible ({path}): {e}")
            raise StorageError("Écriture du fichier impossible") from e
        return StoredFile(path=saved, url=default_storage.url(saved))


class SupabaseStorage:
    name = "supabase"

    def __init__(self, url: str, service_key: str, bucket: str, timeout: int = 30):
        if not url or not service_key:
            raise StorageError("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY non configurés (vérifie ton .env).")
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"

    def save(self, path: str, content, mime_type: str) -> StoredFile:
        endpoint = f"{self.url}/storage/v1/object/{self.bucket}/{path}"
        logger.info(f"[storage] POST {endpoint}")
        try:
            resp = requests.post(
                endpoint,
                data=content.read(),
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                    "Content-Type": mime_type,
                    "x-upsert": "false",
                },
            )
        except RequestException as e:
            logger.error(f"[storage] Erreur réseau vers Supabase: {e}")
            raise StorageError("Stockage objet injoignable") from e

        if resp.status_code >= 400:
            snippet = (resp.text or "")[:300]
            logger.error(f"[storage] HTTP {resp.status_code} de Supabase: {snippet}")
            raise StorageError(f"Échec de l'upload (HTTP {resp.status_code})")
        return StoredFile(path=path, url=self.public_url(path))


def get_storage(config: Optional[dict] = None):
    config = config or settings.OBJECT_STORAGE
    backend = (config.get("BACKEND") or "local").lower()
    if backend == "supabase":
        return SupabaseStorage(
            config.get("SUPABASE_URL", ""),
            config.get("SUPABASE_SERVICE_KEY", ""),
            config.get("BUCKET", "documents"),
            int(config.get("TIMEOUT") or 30),
        )
    if backend == "local":
        return LocalStorage()
    raise StorageError(f"Backend de stockage inconnu: {backend!r}")
