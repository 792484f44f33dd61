"""
Permission System (RBAC)

Three tenant roles: owner, admin and staff. Endpoints declare the set of
roles they accept and authorize() checks membership.

DESIGN: no permission tables. The owner is created with the tenant and
is the only role allowed to change billing (plan upgrades).
"""
from typing import AbstractSet

from bizsuite.core.exceptions import PermissionDenied
from bizsuite.models.user import UserRole

MANAGERS = frozenset({UserRole.OWNER, UserRole.ADMIN})
OWNER_ONLY = frozenset({UserRole.OWNER})
ANY_ROLE = frozenset(UserRole)


def authorize(role: UserRole, required_roles: AbstractSet[UserRole]) -> bool:
    """Return True when ``role`` is one of ``required_roles``."""
    return role in required_roles


def require_roles(role: UserRole, required_roles: AbstractSet[UserRole]) -> None:
    """Raise PermissionDenied unless ``role`` is allowed."""
    if not authorize(role, required_roles):
        raise PermissionDenied()


def can_modify_user(actor_role: UserRole, target_role: UserRole) -> bool:
    """
    Check if a user with ``actor_role`` may edit a user with ``target_role``.

    Rules:
    - Nobody edits the owner through the user-management paths
    - Owners and admins manage everyone else
    """
    if target_role == UserRole.OWNER:
        return False
    return actor_role in MANAGERS
