import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from common.cache import PublicCacheMixin
from common.exceptions import Conflict, UserFacingAPIException
from common.mixins import AdminMutationMixin
from common.notify import revalidate_with_statistics
from common.throttling import ADMIN_THROTTLES, RegistrationRateThrottle
from common.utils import envelope
from users.permissions import IsAdminRole
from .models import Event, EventRegistration
from .notifiers import event_notifier
from .serializers import (
    EventSerializer,
    EventStatusSerializer,
    EventRegistrationSerializer,
    PublicEventSerializer,
)
from .services import change_status, publish_due_events, scheduled_overview

logger = logging.getLogger(__name__)

PUBLIC_PERIODS = ("upcoming", "past", "all")


def _with_counts(queryset):
    return queryset.select_related("antenne").annotate(registrations_count=Count("registrations"))


def _search(queryset, term: str):
    return queryset.filter(
        Q(title__icontains=term) | Q(description__icontains=term) | Q(location__icontains=term)
    )


# ----- Public -----

class EventListView(PublicCacheMixin, generics.ListAPIView):
    """
    GET /api/events/?status=upcoming|past|all&category=&search=&antenne=&page=&per=
    Uniquement les evenements publies.
    """

    serializer_class = PublicEventSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        params = self.request.query_params
        period = params.get("status", "upcoming")
        if period not in PUBLIC_PERIODS:
            raise ValidationError({"status": f"Valeurs possibles: {', '.join(PUBLIC_PERIODS)}"})

        qs = _with_counts(Event.objects.filter(status=Event.Status.PUBLISHED))
        now = timezone.now()
        if period == "upcoming":
            qs = qs.filter(start_date__gte=now)
        elif period == "past":
            qs = qs.filter(start_date__lt=now)

        category = params.get("category")
        if category:
            qs = qs.filter(category=category.upper())
        antenne = params.get("antenne")
        if antenne:
            qs = qs.filter(antenne__city__iexact=antenne)
        search = (params.get("search") or "").strip()
        if search:
            qs = _search(qs, search)

        return qs.order_by("-start_date" if period == "past" else "start_date")


class EventDetailView(PublicCacheMixin, generics.RetrieveAPIView):
    """GET /api/events/<slug ou id>/"""

    serializer_class = PublicEventSerializer
    permission_classes = [permissions.AllowAny]

    def get_object(self):
        value = self.kwargs["slug"]
        lookup = Q(slug=value)
        if value.isdigit():
            lookup |= Q(pk=int(value))
        qs = _with_counts(Event.objects.filter(status=Event.Status.PUBLISHED))
        return generics.get_object_or_404(qs, lookup)

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))


class EventRegistrationView(APIView):
    """
    POST   /api/events/<id>/register/          -> inscription
    DELETE /api/events/<id>/register/?email=   -> annulation
    """

    permission_classes = [permissions.AllowAny]
    throttle_classes = [RegistrationRateThrottle]

    def _get_event(self, pk: int) -> Event:
        event = Event.objects.filter(pk=pk, status=Event.Status.PUBLISHED).first()
        if event is None:
            raise NotFound("Événement non trouvé")
        return event

    def post(self, request, pk: int):
        event = self._get_event(pk)
        if event.is_past:
            raise UserFacingAPIException("Impossible de s'inscrire à un événement passé")

        serializer = EventRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        with transaction.atomic():
            if EventRegistration.objects.filter(event=event, email=email).exists():
                raise Conflict("Vous êtes déjà inscrit à cet événement")
            if event.max_attendees is not None and event.registrations.count() >= event.max_attendees:
                raise Conflict("Cet événement est complet")
            registration = serializer.save(event=event)

        revalidate_with_statistics(event_notifier.public_paths(event))
        logger.info(f"[events] inscription #{registration.pk} a l'evenement {event.pk}")
        return Response(
            envelope(EventRegistrationSerializer(registration).data, "Inscription réussie !"),
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, pk: int):
        event = self._get_event(pk)
        email = (request.query_params.get("email") or "").strip().lower()
        if not email:
            raise UserFacingAPIException("Email requis")

        registration = EventRegistration.objects.filter(event=event, email=email).first()
        if registration is None:
            raise NotFound("Inscription non trouvée")
        registration.delete()

        revalidate_with_statistics(event_notifier.public_paths(event))
        return Response(envelope(message="Inscription annulée"))


# ----- Administration -----

class EventAdminMixin(AdminMutationMixin):
    serializer_class = EventSerializer
    permission_classes = [IsAdminRole]
    notifier = event_notifier
    created_message = "Événement créé avec succès"
    updated_message = "Événement mis à jour avec succès"
    deleted_message = "Événement supprimé avec succès"

    def get_queryset(self):
        return _with_counts(Event.objects.all())

    def get_create_kwargs(self):
        return {"created_by": self.request.user}

    def check_destroy(self, instance):
        if instance.registrations.exists():
            raise Conflict("Impossible de supprimer un événement qui a des inscriptions")


class AdminEventListView(EventAdminMixin, generics.ListCreateAPIView):
    """GET/POST /api/admin/events/?status=DRAFT&category=&search="""

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"].upper())
        if params.get("category"):
            qs = qs.filter(category=params["category"].upper())
        search = (params.get("search") or "").strip()
        if search:
            qs = _search(qs, search)
        return qs


class AdminEventDetailView(EventAdminMixin, generics.RetrieveUpdateDestroyAPIView):
    pass


class AdminEventStatusView(APIView):
    """PATCH /api/admin/events/<id>/status/ {"status": "PUBLISHED"} (ou SCHEDULED + publishedAt)"""

    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def patch(self, request, pk: int):
        event = generics.get_object_or_404(Event, pk=pk)
        serializer = EventStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        change_status(
            event,
            serializer.validated_data["status"],
            published_at=serializer.validated_data.get("published_at"),
            user=request.user,
        )
        event = _with_counts(Event.objects.all()).get(pk=event.pk)
        return Response(envelope(EventSerializer(event).data, "Statut mis à jour"))


class AdminEventRegistrationsView(generics.ListAPIView):
    """GET /api/admin/events/<id>/registrations/"""

    serializer_class = EventRegistrationSerializer
    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def get_queryset(self):
        event = generics.get_object_or_404(Event, pk=self.kwargs["pk"])
        return event.registrations.all()


class PublishScheduledView(APIView):
    """
    GET  /api/admin/events/publish-scheduled/ -> evenements programmes et ceux prets a publier
    POST /api/admin/events/publish-scheduled/ -> publie ceux dont la date est atteinte
    """

    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def get(self, request):
        overview = scheduled_overview()
        return Response(envelope({
            "scheduled": EventSerializer(overview["scheduled"], many=True).data,
            "ready": EventSerializer(overview["ready"], many=True).data,
            "readyCount": len(overview["ready"]),
        }))

    def post(self, request):
        published = publish_due_events(user=request.user)
        return Response(envelope(
            {"published": len(published), "events": EventSerializer(published, many=True).data},
            f"{len(published)} événement(s) publié(s)",
        ))
