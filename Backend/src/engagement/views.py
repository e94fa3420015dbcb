import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from kombu.exceptions import OperationalError
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from common.audit import log_admin_action
from common.exceptions import UserFacingAPIException
from common.notify import revalidate_with_statistics
from common.pagination import PagePerPagination
from common.throttling import (
    ADMIN_THROTTLES,
    ContactDailyRateThrottle,
    ContactRateThrottle,
    NewsletterRateThrottle,
    RateLimitHeadersMixin,
)
from common.utils import envelope, query_bool
from users.permissions import IsAdminRole
from .models import ContactMessage, NewsletterSubscriber
from .serializers import (
    ContactMessageSerializer,
    ContactSerializer,
    NewsletterEmailSerializer,
    NewsletterStatusSerializer,
    NewsletterSubscriberSerializer,
)
from .spam import is_spam, spam_score
from .tasks import send_contact_notification

logger = logging.getLogger(__name__)

CONTACT_RECEIVED = "Message reçu avec succès"


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


class NewsletterView(APIView):
    """
    POST   /api/newsletter/            {"email"} -> abonnement (ou reactivation)
    DELETE /api/newsletter/?email=     -> desabonnement (la ligne est conservee)
    GET    /api/newsletter/?active=&search=&page=&per=   (admin)
    PUT    /api/newsletter/            {"email", "isActive"}  (admin)
    """

    PUBLIC_METHODS = ("POST", "DELETE")

    def get_permissions(self):
        if self.request.method in self.PUBLIC_METHODS:
            return [permissions.AllowAny()]
        return [IsAdminRole()]

    def get_throttles(self):
        if self.request.method in self.PUBLIC_METHODS:
            return [NewsletterRateThrottle()]
        return [throttle() for throttle in ADMIN_THROTTLES]

    def get(self, request):
        qs = NewsletterSubscriber.objects.all()
        active = query_bool(request.query_params.get("active"))
        if active is not None:
            qs = qs.filter(is_active=active)
        search = (request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(email__icontains=search)

        paginator = PagePerPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(NewsletterSubscriberSerializer(page, many=True).data)

    def post(self, request):
        serializer = NewsletterEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        with transaction.atomic():
            subscriber = NewsletterSubscriber.objects.select_for_update().filter(email=email).first()
            if subscriber is not None and subscriber.is_active:
                raise UserFacingAPIException("Cet email est déjà abonné à la newsletter")
            reactivated = subscriber is not None
            if reactivated:
                subscriber.is_active = True
                subscriber.unsubscribed_at = None
                subscriber.save(update_fields=["is_active", "unsubscribed_at", "updated_at"])
            else:
                subscriber = NewsletterSubscriber.objects.create(email=email)

        revalidate_with_statistics()
        if reactivated:
            data = NewsletterSubscriberSerializer(subscriber).data
            return Response(envelope(data, "Abonnement réactivé avec succès"))

        logger.info(f"[newsletter] nouvel abonne #{subscriber.pk}")
        return Response(
            envelope(NewsletterSubscriberSerializer(subscriber).data, "Abonnement à la newsletter réussi !"),
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request):
        email = (request.query_params.get("email") or "").strip().lower()
        if not email:
            raise UserFacingAPIException("Email requis")

        subscriber = NewsletterSubscriber.objects.filter(email=email).first()
        if subscriber is None:
            raise NotFound("Aucun abonnement trouvé pour cet email")
        if subscriber.is_active:
            subscriber.is_active = False
            subscriber.unsubscribed_at = timezone.now()
            subscriber.save(update_fields=["is_active", "unsubscribed_at", "updated_at"])
            revalidate_with_statistics()
        return Response(envelope(message="Désabonnement réussi"))

    def put(self, request):
        serializer = NewsletterStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        subscriber = NewsletterSubscriber.objects.filter(email=data["email"]).first()
        if subscriber is None:
            raise NotFound("Aucun abonnement trouvé pour cet email")
        subscriber.is_active = data["is_active"]
        subscriber.unsubscribed_at = None if subscriber.is_active else timezone.now()
        subscriber.save(update_fields=["is_active", "unsubscribed_at", "updated_at"])

        revalidate_with_statistics()
        log_admin_action(request.user, "updated", "newsletter", subscriber.pk, {"isActive": subscriber.is_active})
        state = "activé" if subscriber.is_active else "désactivé"
        return Response(envelope(NewsletterSubscriberSerializer(subscriber).data, f"Abonné {state} avec succès"))


class ContactView(RateLimitHeadersMixin, APIView):
    """POST /api/contact/ ; GET -> 405."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [ContactRateThrottle, ContactDailyRateThrottle]

    def post(self, request):
        serializer = ContactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("company"):
            # robot: meme reponse qu'un envoi reussi, rien n'est stocke
            logger.info(f"[contact] honeypot rempli depuis {client_ip(request)}, message ignore")
            return Response(envelope(message=CONTACT_RECEIVED), status=status.HTTP_201_CREATED)

        score = spam_score(data["email"], data.get("subject", ""), data["message"])
        spam = is_spam(score)
        contact = ContactMessage.objects.create(
            name=data["name"],
            email=data["email"],
            subject=(data.get("subject") or "").strip(),
            message=data["message"],
            status=ContactMessage.Status.SPAM if spam else ContactMessage.Status.PENDING,
            spam_score=score,
            ip_address=client_ip(request),
            user_agent=(request.META.get("HTTP_USER_AGENT") or "")[:300],
        )
        logger.info(f"[contact] message #{contact.pk} enregistre (score spam {score})")

        revalidate_with_statistics()

        if not spam:
            try:
                send_contact_notification.delay(contact.pk)
            except OperationalError as e:
                # le message est enregistre: il reste PENDING et visible dans l'admin
                logger.error(f"[contact] mise en file de la notification #{contact.pk} impossible: {e}")

        return Response(envelope({"id": contact.pk}, CONTACT_RECEIVED), status=status.HTTP_201_CREATED)


class AdminContactMessageListView(generics.ListAPIView):
    """GET /api/admin/contact-messages/?status=SPAM&search="""

    serializer_class = ContactMessageSerializer
    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES

    def get_queryset(self):
        qs = ContactMessage.objects.all()
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"].upper())
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(email__icontains=search)
                | Q(subject__icontains=search) | Q(message__icontains=search)
            )
        return qs


class AdminContactMessageDetailView(generics.RetrieveUpdateAPIView):
    """GET / PATCH /api/admin/contact-messages/<id>/ {"status": "SPAM"}"""

    serializer_class = ContactMessageSerializer
    permission_classes = [IsAdminRole]
    throttle_classes = ADMIN_THROTTLES
    queryset = ContactMessage.objects.all()
    http_method_names = ["get", "patch", "head", "options"]

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))

    def update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        response = super().update(request, *args, **kwargs)
        log_admin_action(request.user, "updated", "contact_message", kwargs.get("pk"),
                         {"status": response.data.get("status")})
        return Response(envelope(response.data, "Message mis à jour"))
