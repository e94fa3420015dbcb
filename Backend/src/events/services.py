"""
Cycle de vie des evenements: transitions de statut et publication programmee.

    DRAFT     -> PUBLISHED | SCHEDULED | ARCHIVED
    SCHEDULED -> PUBLISHED | DRAFT | ARCHIVED
    PUBLISHED -> DRAFT | ARCHIVED
    ARCHIVED  -> DRAFT
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from common.exceptions import UserFacingAPIException
from .models import Event
from .notifiers import event_notifier

logger = logging.getLogger(__name__)

Status = Event.Status

ALLOWED_TRANSITIONS = {
    Status.DRAFT: {Status.PUBLISHED, Status.SCHEDULED, Status.ARCHIVED},
    Status.SCHEDULED: {Status.PUBLISHED, Status.DRAFT, Status.ARCHIVED},
    Status.PUBLISHED: {Status.DRAFT, Status.ARCHIVED},
    Status.ARCHIVED: {Status.DRAFT},
}


class InvalidStatusChange(UserFacingAPIException):
    default_detail = "Changement de statut invalide."
    default_code = "invalid_status"


def apply_status(event: Event, new_status: str, published_at: Optional[datetime] = None,
                 now: Optional[datetime] = None) -> None:
    """Valide la transition et met a jour ``status`` / ``published_at`` (sans sauvegarder)."""
    now = now or timezone.now()
    if new_status not in ALLOWED_TRANSITIONS.get(event.status, set()):
        raise InvalidStatusChange(f"Transition de statut invalide: {event.status} -> {new_status}")

    if new_status == Status.PUBLISHED:
        if event.start_date <= now:
            raise InvalidStatusChange("Impossible de publier un événement dont la date est passée")
        event.published_at = now
    elif new_status == Status.SCHEDULED:
        if published_at is None or published_at <= now:
            raise InvalidStatusChange("La date de publication programmée doit être dans le futur")
        event.published_at = published_at
    elif new_status == Status.DRAFT:
        event.published_at = None
    event.status = new_status


def change_status(event: Event, new_status: str, *, published_at: Optional[datetime] = None,
                  user=None) -> Event:
    before = event_notifier.capture(event)
    apply_status(event, new_status, published_at)
    with transaction.atomic():
        event.save(update_fields=["status", "published_at", "updated_at"])
    event_notifier.notify(event_notifier.action_for(before, event), event, user=user, before=before)
    return event


def due_scheduled_events(now: Optional[datetime] = None):
    now = now or timezone.now()
    return Event.objects.filter(status=Status.SCHEDULED, published_at__lte=now).order_by("published_at")


def publish_due_events(now: Optional[datetime] = None, user=None) -> List[Event]:
    """
    Publie les evenements SCHEDULED dont la date de publication est atteinte.
    Ceux qui ont deja commence ne peuvent plus etre publies: ils sont archives.
    """
    now = now or timezone.now()
    published = []
    for event in due_scheduled_events(now):
        before = event_notifier.capture(event)
        if event.start_date <= now:
            apply_status(event, Status.ARCHIVED, now=now)
            with transaction.atomic():
                event.save(update_fields=["status", "updated_at"])
            logger.warning(f"[events] evenement {event.pk} programme apres son debut, archive")
            event_notifier.notify("archived", event, user=user, before=before)
            continue

        event.status = Status.PUBLISHED
        with transaction.atomic():
            event.save(update_fields=["status", "updated_at"])
        event_notifier.notify("published", event, user=user, before=before)
        published.append(event)

    if published:
        logger.info(f"[events] {len(published)} evenement(s) programme(s) publie(s)")
    return published


def scheduled_overview(now: Optional[datetime] = None) -> Dict[str, list]:
    now = now or timezone.now()
    scheduled = Event.objects.filter(status=Status.SCHEDULED).order_by("published_at")
    return {
        "scheduled": list(scheduled),
        "ready": [e for e in scheduled if e.published_at and e.published_at <= now],
    }
