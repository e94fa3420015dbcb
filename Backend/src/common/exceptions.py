import logging
from typing import Any, Optional

from django.conf import settings
from django.db import IntegrityError
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    Throttled,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from .serializers import camelize

logger = logging.getLogger(__name__)


class UserFacingAPIException(APIException):
    """
    Exception controllable et propre pour retourner un message a l'utilisateur.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Une erreur est survenue."
    default_code = "error"


class Conflict(UserFacingAPIException):
    """Conflit d'unicite ou etat de la ressource incompatible (409)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "La ressource existe déjà ou est utilisée."
    default_code = "conflict"


class ServiceUnavailable(UserFacingAPIException):
    """Service externe (stockage objet) injoignable."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Service externe indisponible."
    default_code = "bad_gateway"


def _error_message(exc: APIException) -> str:
    if isinstance(exc, NotAuthenticated):
        return "Authentification requise"
    if isinstance(exc, Throttled):
        return "Trop de requêtes, veuillez réessayer plus tard"
    if isinstance(exc, MethodNotAllowed):
        return "Méthode non autorisée"
    # messages DRF par defaut -> messages generiques
    if isinstance(exc, PermissionDenied) and str(exc.detail) == str(PermissionDenied.default_detail):
        return "Accès refusé"
    if isinstance(exc, NotFound) and str(exc.detail) == str(NotFound.default_detail):
        return "Ressource introuvable"
    if isinstance(exc.detail, (list, dict)):
        return str(exc.default_detail)
    return str(exc.detail)


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    Enveloppe les erreurs DRF dans un format stable: {"error": str, "details"?: ...}.
    Active via REST_FRAMEWORK['EXCEPTION_HANDLER'] = 'common.exceptions.custom_exception_handler'
    """
    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, (IntegrityError, ProtectedError)):
        logger.info(f"[api] conflit base de donnees: {exc}")
        exc = Conflict()

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, ValidationError):
            data: dict[str, Any] = {"error": "Données invalides", "details": camelize(response.data)}
        else:
            data = {"error": _error_message(exc)}
            if isinstance(exc, Throttled) and "Retry-After" in response.headers:
                data["retryAfter"] = int(response.headers["Retry-After"])
        response.data = data
        return response

    # Erreur non geree -> 500 (stack trace seulement hors production)
    view = context.get("view")
    where = view.__class__.__name__ if view is not None else "?"
    if settings.DEBUG:
        logger.exception(f"[api] erreur inattendue dans {where}")
    else:
        logger.error(f"[api] erreur inattendue dans {where}: {exc.__class__.__name__}: {exc}")
    set_rollback()

    body: dict[str, Any] = {"error": "Erreur serveur"}
    if settings.DEBUG:
        body["details"] = str(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def ensure_unique(queryset, instance, message: str) -> None:
    """Leve Conflict (409) si ``queryset`` contient une autre ligne que ``instance``."""
    if instance is not None and instance.pk:
        queryset = queryset.exclude(pk=instance.pk)
    if queryset.exists():
        raise Conflict(message)
