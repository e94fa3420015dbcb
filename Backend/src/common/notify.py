"""
Effets de bord d'une ecriture d'administration reussie, dans l'ordre:
revalidation des pages -> journal d'audit -> diffusion SSE.

Aucun n'est rejoue ; un client SSE deconnecte ne recoit simplement rien.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import unquote

from django.urls import NoReverseMatch, reverse

from .audit import log_admin_action
from .cache import revalidate_paths
from .realtime import broker

logger = logging.getLogger(__name__)

STATISTICS_ROUTE = "statistics"


def public_path(route: str, value) -> str:
    # request.path est decode: on compare des chemins decodes
    return unquote(reverse(route, args=[value]))


def revalidate_with_statistics(paths: Iterable[str] = ()) -> None:
    """Ecritures publiques (inscriptions, newsletter, contact): les compteurs changent aussi."""
    revalidate_paths([*paths, reverse(STATISTICS_ROUTE)])


class ResourceNotifier:
    """
    Decrit une famille de ressources: son canal SSE, ses routes publiques et admin,
    et la charge utile minimale d'une notification.
    """

    channel: str = ""
    kind: str = ""
    admin_list_route: str = ""
    public_list_route: Optional[str] = None
    public_detail_route: Optional[str] = None
    detail_lookup: str = "slug"

    def is_public(self, obj) -> bool:
        return True

    def payload(self, obj) -> Dict[str, Any]:
        return {"id": obj.pk, "updatedAt": getattr(obj, "updated_at", None)}

    def detail_values(self, obj) -> List[str]:
        """Valeurs sous lesquelles la page de detail publique peut etre demandee."""
        value = getattr(obj, self.detail_lookup, None)
        return [str(value)] if value else []

    def related_paths(self, obj) -> List[str]:
        """Pages publiques d'autres ressources qui affichent ``obj``."""
        return []

    def public_paths(self, obj) -> List[str]:
        paths = []
        if self.public_list_route:
            paths.append(reverse(self.public_list_route))
        if self.public_detail_route:
            for value in self.detail_values(obj):
                try:
                    paths.append(public_path(self.public_detail_route, value))
                except NoReverseMatch:
                    logger.warning(f"[notify] chemin public introuvable pour {self.kind}:{obj.pk}")
        paths.extend(self.related_paths(obj))
        return paths

    def capture(self, obj) -> Dict[str, Any]:
        """Etat a retenir avant l'ecriture (suppression, depublication, changement de slug)."""
        return {
            "public": self.is_public(obj),
            "paths": self.public_paths(obj),
            "payload": self.payload(obj),
        }

    def action_for(self, before: Dict[str, Any], obj) -> str:
        now_public = self.is_public(obj)
        if now_public and not before["public"]:
            return "published"
        if before["public"] and not now_public:
            return "unpublished"
        return "updated"

    def notify(self, action: str, obj=None, *, user=None, before: Optional[Dict[str, Any]] = None) -> None:
        after = self.capture(obj) if obj is not None else None

        paths = {reverse(self.admin_list_route), reverse(STATISTICS_ROUTE)}
        for state in (before, after):
            if state and state["public"]:
                paths.update(state["paths"])
        revalidate_paths(sorted(paths))

        payload = (after or before or {}).get("payload", {})
        log_admin_action(user, action, self.kind, payload.get("id"), {"title": payload.get("title")})

        event_type = f"{self.kind}:{action}"
        delivered = broker.publish(self.channel, event_type, payload)
        logger.debug(f"[notify] {event_type} diffuse a {delivered} abonne(s)")
