"""
Request Contexts

Identity objects built once per request after authentication and passed
explicitly into every service call. Services never look at the request.
"""
from dataclasses import dataclass

from bizsuite.models.user import UserRole


@dataclass(frozen=True)
class TenantContext:
    """Who is calling, on behalf of which tenant."""

    tenant_id: str
    user_id: str
    role: UserRole
    email: str = ""


@dataclass(frozen=True)
class AdminContext:
    """
    A platform admin identity.

    Admin services are the only code allowed to read or write across tenants.
    """

    admin_id: str
    email: str
    role: str = "admin"
