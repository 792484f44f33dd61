"""
Authentication Service

Tenant registration, login and per-request session validation.

SECURITY: tenant state is re-read from the database on every request, so
a suspension (or an expired trial) locks out tokens issued before it.
"""
from datetime import datetime, timedelta
from typing import Any, Dict

from sqlalchemy.orm import Session, joinedload

from bizsuite.config import get_settings
from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import (
    AppError,
    AuthenticationError,
    ConflictError,
    PermissionDenied,
    TenantSuspendedError,
    TrialExpiredError,
)
from bizsuite.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from bizsuite.database import atomic
from bizsuite.models.module import Module, TenantModule
from bizsuite.models.plan import Plan
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.models.user import User, UserRole
from bizsuite.schemas.auth import RegisterRequest
from bizsuite.services.tenants import tenant_payload
from bizsuite.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)
settings = get_settings()


def issue_token(user: User) -> str:
    return create_access_token({
        "sub": user.id,
        "tenant_id": user.tenant_id,
        "email": user.email,
        "role": user.role.value,
    })


def _auth_payload(user: User, tenant: Tenant) -> Dict[str, Any]:
    return {
        "token": issue_token(user),
        "token_type": "bearer",
        "user": user,
        "tenant": tenant,
    }


def check_tenant_access(db: Session, tenant: Tenant, now: datetime = None) -> None:
    """
    Refuse access for suspended or expired tenants.

    A trial whose end date has passed is switched to expired here and the
    change is committed before the refusal is raised.
    """
    now = now or datetime.utcnow()
    if tenant.status == TenantStatus.SUSPENDED:
        raise TenantSuspendedError()

    if tenant.trial_has_ended(now):
        with atomic(db):
            tenant.status = TenantStatus.EXPIRED
        logger.info("Trial expired", extra={"tenant_id": tenant.id})
        raise TrialExpiredError()

    if tenant.status == TenantStatus.EXPIRED:
        raise TrialExpiredError()


def register(db: Session, data: RegisterRequest) -> Dict[str, Any]:
    """
    Create a tenant on the trial plan together with its owner user.

    Tenant, owner and one enabled TenantModule per known module are
    written in a single transaction.
    """
    if db.query(Tenant).filter(Tenant.slug == data.slug).first():
        raise ConflictError("Tenant slug already exists")
    if db.query(User).filter(User.email == data.email).first():
        raise ConflictError("Email already exists")

    trial_plan = db.query(Plan).filter(Plan.name == settings.TRIAL_PLAN_NAME).first()
    if trial_plan is None:
        logger.error(f"Trial plan '{settings.TRIAL_PLAN_NAME}' is not seeded")
        raise AppError(500, "Trial plan not found. Please run the seed step.")

    trial_days = (trial_plan.features or {}).get("trialDurationDays", settings.TRIAL_DURATION_DAYS)
    now = datetime.utcnow()

    with atomic(db):
        tenant = Tenant(
            name=data.tenant_name,
            slug=data.slug,
            business_type=data.business_type,
            status=TenantStatus.TRIAL,
            plan=trial_plan,
            trial_start_date=now,
            trial_end_date=now + timedelta(days=trial_days),
        )
        db.add(tenant)
        db.flush()

        owner = User(
            tenant_id=tenant.id,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.OWNER,
            is_active=True,
        )
        db.add(owner)

        for module in db.query(Module).all():
            db.add(TenantModule(tenant_id=tenant.id, module_id=module.id, is_enabled=True))

    logger.info(f"Tenant registered: {tenant.slug}", extra={"tenant_id": tenant.id, "user_id": owner.id})
    return _auth_payload(owner, tenant)


def login(db: Session, email: str, password: str) -> Dict[str, Any]:
    """
    Authenticate a tenant user by email and password.

    Unknown email and wrong password produce the same error. Tenant state
    is only revealed to callers holding valid credentials.
    """
    user = (
        db.query(User)
        .options(joinedload(User.tenant).joinedload(Tenant.plan))
        .filter(User.email == email)
        .first()
    )

    if user is None or not verify_password(password, user.hashed_password):
        log_security_event(
            "failed_login",
            {"reason": "invalid_credentials", "email": email},
            logger
        )
        raise AuthenticationError("Invalid email or password")

    tenant = user.tenant
    try:
        check_tenant_access(db, tenant)
    except PermissionDenied:
        log_security_event(
            "suspended_tenant_access" if tenant.status == TenantStatus.SUSPENDED else "trial_expired",
            {"tenant_id": tenant.id, "user_id": user.id},
            logger
        )
        raise

    if not user.is_active:
        log_security_event("failed_login", {"reason": "user_inactive", "user_id": user.id}, logger)
        raise PermissionDenied("Your account has been deactivated")

    with atomic(db):
        user.last_login_at = datetime.utcnow()

    logger.info(f"Successful login: user={user.id}, tenant={tenant.id}")
    return _auth_payload(user, tenant)


def resolve_session(db: Session, token: str) -> TenantContext:
    """
    Turn a bearer token into a TenantContext.

    Validates the signature, then reloads the user and tenant so that
    deactivation and suspension take effect immediately.
    """
    payload = decode_access_token(token)
    if not payload or not payload.get("sub") or not payload.get("tenant_id"):
        raise AuthenticationError("Invalid or expired token")

    user = (
        db.query(User)
        .options(joinedload(User.tenant))
        .filter(
            User.id == payload["sub"],
            User.tenant_id == payload["tenant_id"]
        )
        .first()
    )
    if user is None:
        log_security_event("invalid_token", {"reason": "user_not_found", "user_id": payload["sub"]}, logger)
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise PermissionDenied("Your account has been deactivated")

    try:
        check_tenant_access(db, user.tenant)
    except PermissionDenied:
        log_security_event(
            "suspended_tenant_access",
            {"tenant_id": user.tenant_id, "user_id": user.id, "status": user.tenant.status.value},
            logger
        )
        raise

    return TenantContext(
        tenant_id=user.tenant_id,
        user_id=user.id,
        role=user.role,
        email=user.email,
    )


def current_user(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    """The caller, their tenant (with effective limits) and enabled modules."""
    user = db.query(User).filter(User.id == ctx.user_id, User.tenant_id == ctx.tenant_id).first()
    if user is None:
        raise AuthenticationError("User not found")

    modules = (
        db.query(Module.name)
        .join(TenantModule, TenantModule.module_id == Module.id)
        .filter(TenantModule.tenant_id == ctx.tenant_id, TenantModule.is_enabled.is_(True))
        .order_by(Module.name)
        .all()
    )
    return {
        "user": user,
        "tenant": tenant_payload(user.tenant),
        "modules": [name for (name,) in modules],
    }
