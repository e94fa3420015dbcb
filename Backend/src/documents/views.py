from django.db import transaction
from django.db.models import F, Q
from rest_framework import generics, permissions
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from common.cache import PublicCacheMixin
from common.mixins import AdminMutationMixin
from common.throttling import ADMIN_THROTTLES
from common.utils import envelope
from users.models import Role
from users.permissions import IsAdminRole, request_has_role
from .models import Document, DocumentVersion
from .notifiers import document_notifier
from .serializers import (
    DocumentSerializer,
    DocumentPublishSerializer,
    DocumentVersionSerializer,
    NewVersionSerializer,
    PublicDocumentSerializer,
)


def _filter_documents(queryset, params):
    category = params.get("category")
    if category:
        queryset = queryset.filter(category=category.upper())
    tag = (params.get("tag") or "").strip()
    if tag:
        queryset = queryset.filter(tags__name__iexact=tag)
    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(description__icontains=search) | Q(tags__name__icontains=search)
        )
    return queryset.distinct()


def _public_documents(request):
    """Documents visibles par l'appelant ; seuls les admins voient les non publies."""
    qs = Document.objects.visible_to(request.user).prefetch_related("tags")
    if not request_has_role(request, Role.ADMIN):
        qs = qs.filter(is_published=True)
    return qs


# ----- Public -----

class DocumentListView(PublicCacheMixin, generics.ListAPIView):
    """GET /api/documents/?category=&tag=&search=&page=&per="""

    serializer_class = PublicDocumentSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        return _filter_documents(_public_documents(self.request), self.request.query_params)


class DocumentDetailView(PublicCacheMixin, generics.RetrieveAPIView):
    serializer_class = PublicDocumentSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "slug"

    def get_queryset(self):
        return _public_documents(self.request)

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))


class DocumentDownloadView(APIView):
    """POST /api/documents/<slug>/download/ -> incremente le compteur, renvoie l'URL du fichier."""

    permission_classes = [permissions.AllowAny]

    def post(self, request, slug: str):
        document = generics.get_object_or_404(_public_documents(request), slug=slug)
        if not document.can_download:
            raise PermissionDenied("Téléchargement non autorisé pour ce document")

        Document.objects.filter(pk=document.pk).update(downloads=F("downloads") + 1)
        document.refresh_from_db(fields=["downloads"])
        return Response(envelope({
            "fileUrl": document.file_url,
            "fileName": document.file_name,
            "downloads": document.downloads,
        }))


# ----- Administration -----

class DocumentAdminMixin(AdminMutationMixin):
    serializer_class = DocumentSerializer
    permission_classes = [IsAdminRole]
    notifier = document_notifier
    created_message = "Document créé avec succès"
    updated_message = "Document mis à jour avec succès"
    deleted_message = "Document supprimé avec succès"

    def get_queryset(self):
        return Document.objects.prefetch_related("tags")

    def get_create_kwargs(self):
        return {"created_by": self.request.user}


class AdminDocumentListView(DocumentAdminMixin, generics.ListCreateAPIView):
    """GET/POST /api/admin/documents/?category=&visibility=&published=&search="""

    def get_queryset(self):
        qs = _filter_documents(super().get_queryset(), self.request.query_params)
        visibility = self.request.query_params.get("visibility")
        if visibility:
            qs = qs.filter(visibility=visibility.upper())
        published = self.request.query_params.get("published")
        if published in ("true", "false"):
            qs = qs.filter(is_published=published == "true")
        return qs


class AdminDocumentDetailView(DocumentAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    def retrieve(self, request, *args, **kwargs):
        document = self.get_object()
        data = self.get_serializer(document).data
        data["versions"] = DocumentVersionSerializer(document.versions.all(), many=True).data
        return Response(envelope(data))


class AdminDocumentPublishView(APIView):
    """
    POST|PATCH /api/admin/documents/<id>/publish/
    Corps {"isPublished": bool} optionnel: sans corps, bascule l'etat courant.
    """

    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def post(self, request, pk: int):
        document = generics.get_object_or_404(Document, pk=pk)
        serializer = DocumentPublishSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data.get("is_published", not document.is_published)

        before = document_notifier.capture(document)
        write = DocumentSerializer(document, data={"is_published": target}, partial=True)
        write.is_valid(raise_exception=True)
        with transaction.atomic():
            document = write.save()
        document_notifier.notify(document_notifier.action_for(before, document), document,
                                 user=request.user, before=before)

        message = "Document publié" if document.is_published else "Document dépublié"
        return Response(envelope(DocumentSerializer(document).data, message))

    patch = post


class AdminDocumentNewVersionView(APIView):
    """POST /api/admin/documents/<id>/new-version/ {fileUrl, fileName?, fileSize?, mimeType?, note?}"""

    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def post(self, request, pk: int):
        serializer = NewVersionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            document = generics.get_object_or_404(Document.objects.select_for_update(), pk=pk)
            before = document_notifier.capture(document)
            document.version += 1
            document.file_url = data["file_url"]
            document.file_name = data.get("file_name", document.file_name)
            document.file_size = data.get("file_size", document.file_size)
            document.mime_type = data.get("mime_type", document.mime_type)
            document.save()
            DocumentVersion.objects.create(
                document=document,
                version=document.version,
                file_url=document.file_url,
                file_name=document.file_name,
                file_size=document.file_size,
                mime_type=document.mime_type,
                note=data.get("note", ""),
                created_by=request.user,
            )

        document_notifier.notify("updated", document, user=request.user, before=before)
        body = DocumentSerializer(document).data
        body["versions"] = DocumentVersionSerializer(document.versions.all(), many=True).data
        return Response(envelope(body, f"Version {document.version} enregistrée"), status=201)
