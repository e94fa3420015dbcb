from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from common.audit import log_admin_action
from common.exceptions import ServiceUnavailable, UserFacingAPIException
from common.throttling import ADMIN_THROTTLES
from common.utils import envelope
from users.permissions import IsAdminRole
from .storage import ALLOWED_MIME_TYPES, StorageError, build_object_path, get_storage, max_size_for

logger = logging.getLogger(__name__)

UPLOAD_FOLDERS = ("documents", "events", "projects", "partners", "members")


class UploadView(APIView):
    """
    POST /api/admin/upload/ (multipart: file, folder?)
    -> {"fileUrl", "fileName", "mimeType", "fileSize", "filePath"}
    """

    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        upload = request.FILES.get("file")
        if upload is None:
            raise UserFacingAPIException("Aucun fichier fourni")

        mime_type = upload.content_type or ""
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UserFacingAPIException("Type de fichier non autorisé")

        limit = max_size_for(mime_type)
        if upload.size > limit:
            raise UserFacingAPIException(f"Fichier trop volumineux (max {limit // (1024 * 1024)} Mo)")

        folder = request.data.get("folder") or "documents"
        if folder not in UPLOAD_FOLDERS:
            raise UserFacingAPIException("Dossier de destination invalide")

        path = build_object_path(upload.name, mime_type, folder)
        try:
            storage = get_storage()
            stored = storage.save(path, upload, mime_type)
        except StorageError as e:
            raise ServiceUnavailable(str(e)) from e

        file_url = stored.url
        if file_url.startswith("/"):
            file_url = request.build_absolute_uri(file_url)

        logger.info(f"[upload] {upload.name} -> {stored.path} ({storage.name}, {upload.size} octets)")
        log_admin_action(request.user, "uploaded", "file", stored.path, {"mimeType": mime_type})
        return Response(
            envelope({
                "fileUrl": file_url,
                "fileName": upload.name,
                "mimeType": mime_type,
                "fileSize": upload.size,
                "filePath": stored.path,
            }, "Fichier téléversé avec succès"),
            status=status.HTTP_201_CREATED,
        )
