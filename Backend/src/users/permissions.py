"""
Hierarchie des roles, centralisee: MEMBER < ADMIN < SUPER_ADMIN.
Un role satisfait une exigence s'il est egal ou superieur.
"""
from typing import Optional

from rest_framework.permissions import BasePermission

from .models import Role

ROLE_ORDER = {
    Role.MEMBER: 0,
    Role.ADMIN: 1,
    Role.SUPER_ADMIN: 2,
}


def has_required_role(role: Optional[str], required: str) -> bool:
    if role not in ROLE_ORDER:
        return False
    return ROLE_ORDER[role] >= ROLE_ORDER[required]


def request_has_role(request, required: str) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and has_required_role(getattr(user, "role", None), required))


class HasMinimumRole(BasePermission):
    """Anonyme -> 401 (NotAuthenticated), role insuffisant -> 403."""

    required_role = Role.ADMIN
    message = "Accès refusé"

    def has_permission(self, request, view):
        return request_has_role(request, self.required_role)


class IsMemberRole(HasMinimumRole):
    required_role = Role.MEMBER


class IsAdminRole(HasMinimumRole):
    required_role = Role.ADMIN


class IsSuperAdminRole(HasMinimumRole):
    required_role = Role.SUPER_ADMIN
