"""
Invalidation ("revalidation") des reponses publiques mises en cache.

Chaque chemin a un numero de generation dans le cache ; la cle d'une page
en cache inclut cette generation. Revalider un chemin = incrementer sa
generation, les anciennes entrees expirent d'elles-memes.
"""
import logging
from typing import Callable, Iterable, Optional

from django.conf import settings
from django.core.cache import cache
from rest_framework.response import Response

logger = logging.getLogger(__name__)

_GENERATION_KEY = "revalidate:gen:{path}"
_PAGE_KEY = "revalidate:page:{path}:{generation}:{query}"


def _generation(path: str) -> int:
    return cache.get_or_set(_GENERATION_KEY.format(path=path), 1, timeout=None)


def revalidate_path(path: str) -> None:
    key = _GENERATION_KEY.format(path=path)
    try:
        cache.incr(key)
    except ValueError:
        # pas encore de generation: rien n'est en cache pour ce chemin
        cache.set(key, 2, timeout=None)


def revalidate_paths(paths: Iterable[str]) -> None:
    """Best-effort: un echec du cache est journalise, jamais remonte a l'appelant."""
    for path in paths:
        try:
            revalidate_path(path)
        except Exception as exc:  # backend de cache indisponible (Redis...)
            logger.warning(f"[cache] revalidation de {path} impossible: {exc}")


def _page_key(request, path: Optional[str] = None) -> str:
    path = path or request.path
    return _PAGE_KEY.format(
        path=path,
        generation=_generation(path),
        query=request.META.get("QUERY_STRING", ""),
    )


def cached_public_response(request, build: Callable[[], Response], timeout: Optional[int] = None,
                           path: Optional[str] = None) -> Response:
    """
    Sert une reponse GET anonyme depuis le cache (par chemin + query string).
    ``path`` remplace le chemin demande quand plusieurs URL designent la meme page.
    Les utilisateurs connectes (admins, membres) voient toujours la version fraiche.
    """
    if request.user.is_authenticated:
        return build()

    key = _page_key(request, path)
    cached = cache.get(key)
    if cached is not None:
        return Response(cached)

    response = build()
    if response.status_code == 200:
        cache.set(key, response.data, timeout or settings.PUBLIC_CACHE_TIMEOUT)
    return response


class PublicCacheMixin:
    """A placer avant une vue generique (ListAPIView, RetrieveAPIView)."""

    def get(self, request, *args, **kwargs):
        return cached_public_response(request, lambda: super(PublicCacheMixin, self).get(request, *args, **kwargs))
