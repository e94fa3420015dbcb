import logging

from django.contrib.auth import authenticate, get_user_model
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from common.exceptions import UserFacingAPIException

logger = logging.getLogger(__name__)

User = get_user_model()


class AccountLocked(UserFacingAPIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Compte temporairement verrouillé suite à trop de tentatives. Réessayez plus tard."
    default_code = "account_locked"


def _find_user(identifier: str):
    identifier = (identifier or "").strip()
    if "@" in identifier:
        return User.objects.filter(email__iexact=identifier).first()
    return User.objects.filter(username=identifier).first()


def authenticate_with_lockout(request, identifier: str, password: str):
    """
    Authentifie par username ou e-mail.
    Echec -> compteur incremente (verrouillage au seuil) ; succes -> compteur remis a zero.
    """
    user = _find_user(identifier)
    if user is not None and user.is_locked:
        logger.warning(f"[auth] tentative sur compte verrouille user:{user.pk}")
        raise AccountLocked()

    username = user.get_username() if user is not None else identifier
    authed = authenticate(request, username=username, password=password)
    if authed is None:
        if user is not None:
            user.register_failed_login()
            if user.is_locked:
                logger.warning(f"[auth] compte verrouille apres echecs user:{user.pk}")
                raise AccountLocked()
        raise AuthenticationFailed("Identifiants invalides")

    authed.reset_failed_logins()
    return authed
