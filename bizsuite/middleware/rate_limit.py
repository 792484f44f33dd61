"""
Rate Limiting Middleware

Per-tenant rate limiting using Redis.

ARCHITECTURE: token bucket in Redis. Authenticated tenant requests share
one bucket per tenant (read from the token's tenant claim, no database
hit); anonymous requests get a bucket per client address.

PRODUCTION NOTES:
- Redis is single point of failure (use Redis Cluster/Sentinel)
- Degrades open: if Redis is unreachable, requests are let through
"""
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import redis
import time
import logging

from bizsuite.config import get_settings
from bizsuite.core.exceptions import RateLimitExceeded
from bizsuite.core.security import peek_tenant_id

logger = logging.getLogger(__name__)
settings = get_settings()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket rate limiter keyed by tenant (or client address)."""

    def __init__(self, app, redis_client: Optional[redis.Redis] = None, enabled: Optional[bool] = None):
        super().__init__(app)
        self.enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled
        self.redis_client = redis_client
        self.redis_available = redis_client is not None

        if self.enabled and self.redis_client is None:
            try:
                self.redis_client = redis.from_url(
                    settings.REDIS_URL,
                    decode_responses=True,
                    socket_connect_timeout=5
                )
                self.redis_client.ping()
                self.redis_available = True
                logger.info("Redis connection established for rate limiting")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                # Availability over strict limiting
                logger.error(f"Redis connection failed, rate limiting disabled: {e}")
                self.redis_available = False

        self.excluded_paths = [
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
        ]

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or not self.redis_available:
            return await call_next(request)

        if any(request.url.path.startswith(path) for path in self.excluded_paths):
            return await call_next(request)

        identifier = self._get_client_identifier(request)
        allowed, retry_after = self._check_rate_limit(identifier)

        if not allowed:
            exc = RateLimitExceeded(retry_after)
            logger.warning(
                f"Rate limit exceeded for {identifier}",
                extra={"path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": exc.kind, "message": exc.detail},
                headers=exc.headers
            )

        return await call_next(request)

    def _get_client_identifier(self, request: Request) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            tenant_id = peek_tenant_id(auth_header[len("Bearer "):])
            if tenant_id:
                return f"tenant:{tenant_id}"
        host = request.client.host if request.client else "unknown"
        return f"ip:{host}"

    def _check_rate_limit(self, identifier: str) -> Tuple[bool, int]:
        """
        Check if request is allowed under rate limit.

        Returns: (allowed, retry_after_seconds)

        Token bucket:
        - Bucket holds RATE_LIMIT_BURST tokens
        - Refilled at RATE_LIMIT_PER_MINUTE / 60 tokens per second
        - Each request consumes one token
        """
        rate_limit = settings.RATE_LIMIT_PER_MINUTE
        burst = settings.RATE_LIMIT_BURST

        key = f"rate_limit:{identifier}"
        key_timestamp = f"{key}:timestamp"

        try:
            current_tokens = self.redis_client.get(key)
            last_update = self.redis_client.get(key_timestamp)

            now = time.time()

            if current_tokens is None:
                # First request - initialize bucket
                self.redis_client.setex(key, 60, burst - 1)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            current_tokens = float(current_tokens)
            last_update = float(last_update) if last_update else now

            elapsed = now - last_update
            tokens_to_add = elapsed * (rate_limit / 60.0)
            new_tokens = min(burst, current_tokens + tokens_to_add)

            if new_tokens >= 1:
                new_tokens -= 1
                self.redis_client.setex(key, 60, new_tokens)
                self.redis_client.setex(key_timestamp, 60, now)
                return True, 0

            tokens_needed = 1 - new_tokens
            retry_after = int((tokens_needed / (rate_limit / 60.0)) + 1)
            return False, retry_after

        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return True, 0
