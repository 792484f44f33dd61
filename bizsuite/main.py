"""
Main FastAPI Application

Entry point for the BizSuite multi-tenant business platform.
Configures middleware, routes, error handlers, and startup/shutdown events.

Every error leaves the API as ``{"error": kind, "message": ..., "details": [...]}``
with the HTTP status of its kind.
"""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
import time
import uuid
from contextlib import asynccontextmanager

from bizsuite.config import get_settings
from bizsuite.database import SessionLocal, engine, init_db
from bizsuite.middleware.rate_limit import RateLimitMiddleware
from bizsuite.seed import seed_reference_data
from bizsuite.utils.logging import bind_request_id, get_logger, reset_request_id, setup_logging
from bizsuite.core.exceptions import AppError

# Import routers
from bizsuite.api.endpoints import auth, users, tenant, inventory, hotel, expenses
from bizsuite.api.endpoints.admin.router import router as admin_router
from bizsuite.api.endpoints.ecommerce.router import router as ecommerce_router

settings = get_settings()

# Setup logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    # Create tables and reference data (dev only - use Alembic in production)
    if settings.ENVIRONMENT == "development":
        logger.warning("Initializing database tables (dev mode)")
        init_db()
        db = SessionLocal()
        try:
            seed_reference_data(db)
        finally:
            db.close()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="BizSuite",
    description="Multi-tenant business management: inventory, hotel, expenses and online store",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# ============================================================================
# MIDDLEWARE CONFIGURATION
# ============================================================================

# SECURITY: In production, restrict CORS_ORIGINS to the frontends' domains
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "development" else settings.CORS_ORIGINS,
    allow_credentials=settings.ENVIRONMENT != "development",
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    """Tag each request with an id and report its duration."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = bind_request_id(request_id)
    start_time = time.time()
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(RateLimitMiddleware)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

def _request_extra(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "tenant_id": getattr(request.state, "tenant_id", None),
        "request_id": getattr(request.state, "request_id", None),
    }


def error_response(status_code: int, kind: str, message: str = None, details=None, headers=None) -> JSONResponse:
    content = {"error": kind}
    if message:
        content["message"] = message
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Typed application errors carry their own status, kind and message."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind}: {exc.detail}", extra=_request_extra(request))
    return error_response(exc.status_code, exc.kind, exc.detail, exc.details, exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with one entry per offending field."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "ValidationError", "Validation failed", details)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """A uniqueness or foreign-key violation that slipped past the service checks."""
    logger.warning(f"Integrity error: {exc.orig}", extra=_request_extra(request))
    return error_response(status.HTTP_409_CONFLICT, "Conflict", "Resource conflicts with existing data")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler.

    SECURITY: Don't expose internal errors in production.
    Log full details but return generic error to client.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra=_request_extra(request)
    )
    message = str(exc) if settings.DEBUG else "Internal server error"
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalError", message)


# ============================================================================
# ROUTES
# ============================================================================

@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "BizSuite API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


# All routes are under /api/v1 for versioning
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)
app.include_router(tenant.router, prefix=API_PREFIX)
app.include_router(inventory.router, prefix=API_PREFIX)
app.include_router(hotel.router, prefix=API_PREFIX)
app.include_router(expenses.router, prefix=API_PREFIX)
app.include_router(ecommerce_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    uvicorn.run(
        "bizsuite.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
