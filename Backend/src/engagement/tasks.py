import logging
import smtplib

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage

from .models import ContactMessage

logger = logging.getLogger(__name__)


@shared_task(name="engagement.send_contact_notification")
def send_contact_notification(message_id: int) -> str:
    """Previent la boite de l'association ; le statut passe a SENT ou FAILED."""
    contact = ContactMessage.objects.filter(pk=message_id).first()
    if contact is None:
        logger.warning(f"[contact] message {message_id} introuvable, notification ignoree")
        return "missing"
    if contact.status == ContactMessage.Status.SPAM:
        return contact.status

    email = EmailMessage(
        subject=contact.subject or f"Nouveau message de {contact.name}",
        body=f"De: {contact.name} <{contact.email}>\n\n{contact.message}",
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[settings.CONTACT_NOTIFICATION_EMAIL],
        reply_to=[contact.email],
    )
    try:
        email.send(fail_silently=False)
        contact.status = ContactMessage.Status.SENT
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"[contact] envoi de la notification {contact.pk} impossible: {exc}")
        contact.status = ContactMessage.Status.FAILED
    contact.save(update_fields=["status", "updated_at"])
    return contact.status
