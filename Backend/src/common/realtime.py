"""
Diffusion en process des notifications d'administration vers les flux SSE.

Chaque connexion SSE ouverte est un abonne avec sa propre file bornee.
``publish`` ne bloque jamais: si la file d'un client lent est pleine, le
message est abandonne pour ce client (pas de garantie de livraison).
Outil de developpement / mono-instance, pas une messagerie de production.
"""
from __future__ import annotations

import itertools
import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from .utils import now_utc

logger = logging.getLogger(__name__)

# canal -> prefixe des types d'evenements ("events" -> "event:created", ...)
CHANNELS = {
    "events": "event",
    "documents": "document",
    "projects": "project",
    "partners": "partner",
    "antennes": "antenne",
    "members": "member",
}
ALL_CHANNELS = "all"


def build_message(event_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": event_type, "payload": payload, "timestamp": now_utc().isoformat()}


def format_sse(message: Dict[str, Any]) -> str:
    data = json.dumps(message, cls=DjangoJSONEncoder, ensure_ascii=False)
    return f"event: {message['type']}\ndata: {data}\n\n"


@dataclass(eq=False)
class Subscription:
    id: int
    channels: Optional[FrozenSet[str]]
    queue: "queue.Queue[Dict[str, Any]]" = field(repr=False)

    def accepts(self, channel: str) -> bool:
        return self.channels is None or channel in self.channels

    def get(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Prochain message, ou None si rien n'est arrive avant ``timeout``."""
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None


class EventBroker:
    def __init__(self, max_queue_size: Optional[int] = None):
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._max_queue_size = max_queue_size

    def subscribe(self, channels=None) -> Subscription:
        size = self._max_queue_size or getattr(settings, "SSE_QUEUE_SIZE", 100)
        sub = Subscription(
            id=next(self._ids),
            channels=frozenset(channels) if channels else None,
            queue=queue.Queue(maxsize=size),
        )
        with self._lock:
            self._subscribers[sub.id] = sub
        logger.info(f"[sse] abonne #{sub.id} connecte (canaux={sorted(channels) if channels else 'tous'})")
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            removed = self._subscribers.pop(sub.id, None)
        if removed is not None:
            logger.info(f"[sse] abonne #{sub.id} deconnecte")

    def publish(self, channel: str, event_type: str, payload: Dict[str, Any]) -> int:
        """Diffuse a tous les abonnes du canal ; retourne le nombre de files servies."""
        message = build_message(event_type, payload)
        with self._lock:
            targets = [s for s in self._subscribers.values() if s.accepts(channel)]

        delivered = 0
        for sub in targets:
            try:
                sub.queue.put_nowait(message)
                delivered += 1
            except queue.Full:
                logger.warning(f"[sse] file pleine pour l'abonne #{sub.id}, message {event_type} abandonne")
        return delivered

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def reset(self) -> None:
        with self._lock:
            self._subscribers.clear()


broker = EventBroker()
