from django.db.models import Q
from django.utils import timezone
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from common.cache import PublicCacheMixin, cached_public_response
from common.mixins import AdminMutationMixin, EnvelopeListMixin
from common.notify import public_path
from common.utils import envelope
from events.models import Event, EventRegistration
from users.permissions import IsAdminRole
from .models import Partner, Antenne, ExecutiveMember
from .notifiers import PartnerNotifier, AntenneNotifier, ExecutiveMemberNotifier
from .serializers import PartnerSerializer, AntenneSerializer, ExecutiveMemberSerializer


def _search_antennes(queryset, term: str):
    return queryset.filter(
        Q(city__icontains=term)
        | Q(name__icontains=term)
        | Q(responsable__icontains=term)
        | Q(address__icontains=term)
    )


# ----- Public -----

class PartnerListView(PublicCacheMixin, EnvelopeListMixin, generics.ListAPIView):
    """GET /api/partners/?type=PRIVATE"""

    serializer_class = PartnerSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        qs = Partner.objects.all()
        partner_type = self.request.query_params.get("type")
        if partner_type:
            qs = qs.filter(type=partner_type.upper())
        return qs


class AntenneListView(PublicCacheMixin, EnvelopeListMixin, generics.ListAPIView):
    """GET /api/antennes/?search=rabat"""

    serializer_class = AntenneSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        qs = Antenne.objects.all()
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = _search_antennes(qs, search)
        return qs


class AntenneSearchView(EnvelopeListMixin, generics.ListAPIView):
    """GET /api/antennes/search/?q= ; moins de 2 caracteres -> toutes les antennes."""

    serializer_class = AntenneSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        term = (self.request.query_params.get("q") or "").strip()
        qs = Antenne.objects.all()
        if len(term) < 2:
            return qs
        return _search_antennes(qs, term)


class AntenneStatsView(APIView):
    """GET /api/antennes/<city>/stats/ -> evenements publies rattaches a l'antenne."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, city: str):
        antenne = generics.get_object_or_404(Antenne, city__iexact=city)
        # /antennes/rabat/stats/ et /antennes/Rabat/stats/ partagent la meme entree
        path = public_path("antennes_stats", antenne.city)
        return cached_public_response(request, lambda: self._stats(antenne), path=path)

    def _stats(self, antenne: Antenne):
        now = timezone.now()
        events = Event.objects.filter(antenne=antenne, status=Event.Status.PUBLISHED)
        upcoming = events.filter(start_date__gte=now).order_by("start_date")

        return Response(envelope({
            "city": antenne.city,
            "name": str(antenne),
            "responsable": antenne.responsable,
            "eventsTotal": events.count(),
            "upcomingEvents": upcoming.count(),
            "pastEvents": events.filter(start_date__lt=now).count(),
            "registrations": EventRegistration.objects.filter(event__in=events).count(),
            "nextEvents": [
                {"id": e.pk, "title": e.title, "slug": e.slug, "startDate": e.start_date}
                for e in upcoming[:3]
            ],
        }))


class ExecutiveMemberListView(PublicCacheMixin, EnvelopeListMixin, generics.ListAPIView):
    """GET /api/executive-members/ (membres actifs, par ordre d'affichage)."""

    serializer_class = ExecutiveMemberSerializer
    permission_classes = [permissions.AllowAny]
    queryset = ExecutiveMember.objects.filter(is_active=True)


# ----- Administration -----

class PartnerAdminMixin(AdminMutationMixin):
    serializer_class = PartnerSerializer
    permission_classes = [IsAdminRole]
    queryset = Partner.objects.all()
    notifier = PartnerNotifier()
    created_message = "Partenaire créé avec succès"
    updated_message = "Partenaire mis à jour avec succès"
    deleted_message = "Partenaire supprimé avec succès"


class AdminPartnerListView(PartnerAdminMixin, generics.ListCreateAPIView):
    pass


class AdminPartnerDetailView(PartnerAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    pass


class AntenneAdminMixin(AdminMutationMixin):
    serializer_class = AntenneSerializer
    permission_classes = [IsAdminRole]
    queryset = Antenne.objects.all()
    notifier = AntenneNotifier()
    created_message = "Antenne créée avec succès"
    updated_message = "Antenne mise à jour avec succès"
    deleted_message = "Antenne supprimée avec succès"


class AdminAntenneListView(AntenneAdminMixin, generics.ListCreateAPIView):
    def get_queryset(self):
        qs = super().get_queryset()
        search = (self.request.query_params.get("search") or "").strip()
        return _search_antennes(qs, search) if search else qs


class AdminAntenneDetailView(AntenneAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    pass


class ExecutiveMemberAdminMixin(AdminMutationMixin):
    serializer_class = ExecutiveMemberSerializer
    permission_classes = [IsAdminRole]
    queryset = ExecutiveMember.objects.all()
    notifier = ExecutiveMemberNotifier()
    created_message = "Membre ajouté avec succès"
    updated_message = "Membre mis à jour avec succès"
    deleted_message = "Membre supprimé avec succès"


class AdminExecutiveMemberListView(ExecutiveMemberAdminMixin, generics.ListCreateAPIView):
    pass


class AdminExecutiveMemberDetailView(ExecutiveMemberAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    pass
