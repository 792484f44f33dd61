"""
Security Module

Handles password hashing and JWT token generation/validation.
Uses passlib with bcrypt and python-jose.

Tenant users and platform admins live in separate identity spaces: their
tokens are signed with different secrets and carry a ``type`` claim, and
each decoder rejects the other kind.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from bizsuite.config import get_settings

settings = get_settings()

TENANT_TOKEN = "tenant"
ADMIN_TOKEN = "admin"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    NOTE: This is intentionally slow. Don't call it in loops.
    """
    return pwd_context.hash(password)


def _encode(data: Dict[str, Any], secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.utcnow()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now
    })
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError:
        # Token invalid, expired, or tampered with
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a tenant-user JWT.

    Payload: sub (user id), tenant_id, email, role, type, exp, iat.
    """
    return _encode(
        {**data, "type": TENANT_TOKEN},
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a tenant-user JWT.

    Returns the payload if valid, None if invalid/expired or not a tenant token.
    Whether the user and tenant are still allowed in is checked in deps.
    """
    return _decode(token, settings.SECRET_KEY, TENANT_TOKEN)


def create_admin_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a platform-admin JWT (payload: sub, email, role, type)."""
    return _encode(
        {**data, "type": ADMIN_TOKEN},
        settings.ADMIN_SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)
    )


def decode_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a platform-admin JWT."""
    return _decode(token, settings.ADMIN_SECRET_KEY, ADMIN_TOKEN)


def peek_tenant_id(token: str) -> Optional[str]:
    """
    Read the tenant claim of a tenant token without touching the database.

    Used by the rate limiter to pick a bucket before authentication runs.
    """
    payload = decode_access_token(token)
    if not payload:
        return None
    return payload.get("tenant_id")
