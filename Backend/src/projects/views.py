from django.db.models import Q
from rest_framework import generics, permissions
from rest_framework.response import Response

from common.cache import PublicCacheMixin
from common.mixins import AdminMutationMixin
from common.utils import envelope, query_bool
from users.permissions import IsAdminRole, IsSuperAdminRole
from .models import Project
from .notifiers import project_notifier
from .serializers import ProjectSerializer


def _filter_projects(queryset, params):
    for field in ("category", "status"):
        value = params.get(field)
        if value:
            queryset = queryset.filter(**{field: value.upper()})
    city = (params.get("city") or "").strip()
    if city:
        queryset = queryset.filter(city__iexact=city)
    featured = query_bool(params.get("featured"))
    if featured is not None:
        queryset = queryset.filter(is_featured=featured)
    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(description__icontains=search) | Q(city__icontains=search)
        )
    return queryset


class ProjectListView(PublicCacheMixin, generics.ListAPIView):
    """GET /api/projects/?category=&status=&city=&featured=true&search="""

    serializer_class = ProjectSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        return _filter_projects(Project.objects.filter(is_published=True), self.request.query_params)


class ProjectDetailView(PublicCacheMixin, generics.RetrieveAPIView):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "slug"
    queryset = Project.objects.filter(is_published=True)

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))


class ProjectAdminMixin(AdminMutationMixin):
    serializer_class = ProjectSerializer
    permission_classes = [IsAdminRole]
    notifier = project_notifier
    created_message = "Projet créé avec succès"
    updated_message = "Projet mis à jour avec succès"
    deleted_message = "Projet supprimé avec succès"

    def get_queryset(self):
        return Project.objects.all()

    def get_create_kwargs(self):
        return {"created_by": self.request.user}


class AdminProjectListView(ProjectAdminMixin, generics.ListCreateAPIView):
    """GET/POST /api/admin/projects/?published=false&category=&status="""

    def get_queryset(self):
        qs = super().get_queryset()
        published = query_bool(self.request.query_params.get("published"))
        if published is not None:
            qs = qs.filter(is_published=published)
        return _filter_projects(qs, self.request.query_params)


class SuperAdminDeletePermission(IsSuperAdminRole):
    message = "Seul un super administrateur peut supprimer un projet"


class AdminProjectDetailView(ProjectAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    """La suppression est reservee aux super administrateurs."""

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [SuperAdminDeletePermission()]
        return super().get_permissions()
