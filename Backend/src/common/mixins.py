from django.db import transaction
from rest_framework import status
from rest_framework.response import Response

from .throttling import ADMIN_THROTTLES
from .utils import envelope


class AdminMutationMixin:
    """
    Vues d'administration: chaque ecriture reussie declenche ``notifier.notify``
    (revalidation, audit, SSE) puis renvoie la ressource enveloppee.

    Les sous-classes declarent ``notifier`` et les messages de reponse.
    """

    notifier = None
    throttle_classes = ADMIN_THROTTLES
    created_message = "Ressource créée avec succès"
    updated_message = "Ressource mise à jour avec succès"
    deleted_message = "Ressource supprimée avec succès"

    # ----- hooks -----
    def check_destroy(self, instance) -> None:
        """Refus metier avant suppression (leve une UserFacingAPIException)."""

    def perform_create(self, serializer):
        with transaction.atomic():
            instance = serializer.save(**self.get_create_kwargs())
        self.notifier.notify("created", instance, user=self.request.user)

    def get_create_kwargs(self):
        return {}

    def perform_update(self, serializer):
        before = self.notifier.capture(serializer.instance)
        with transaction.atomic():
            instance = serializer.save()
        self.notifier.notify(self.notifier.action_for(before, instance), instance,
                             user=self.request.user, before=before)

    def perform_destroy(self, instance):
        self.check_destroy(instance)
        before = self.notifier.capture(instance)
        with transaction.atomic():
            instance.delete()
        self.notifier.notify("deleted", user=self.request.user, before=before)

    # ----- reponses -----
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        data = self.get_serializer(self.refresh_instance(serializer.instance)).data
        return Response(envelope(data, self.created_message), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        data = self.get_serializer(self.refresh_instance(serializer.instance)).data
        return Response(envelope(data, self.updated_message))

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response(envelope(message=self.deleted_message))

    def refresh_instance(self, instance):
        """Relit l'objet via le queryset de la vue (annotations, relations)."""
        return self.get_queryset().filter(pk=instance.pk).first() or instance


class EnvelopeListMixin:
    """Listes courtes non paginees: {"success": true, "data": [...], "count": n}."""

    pagination_class = None

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        data = self.get_serializer(queryset, many=True).data
        return Response(envelope(data, count=len(data)))
