import logging

from celery import shared_task

from .services import publish_due_events

logger = logging.getLogger(__name__)


@shared_task(name="events.publish_scheduled_events")
def publish_scheduled_events() -> int:
    """Tache periodique (beat): publie les evenements programmes arrives a echeance."""
    published = publish_due_events()
    return len(published)
