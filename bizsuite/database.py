"""
Database Configuration and Session Management

This module handles SQLAlchemy setup with connection pooling.
Tenant scoping is not done here: every service function receives the
caller's context explicitly and filters on tenant_id itself.
"""
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from bizsuite.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build create_engine() keyword arguments for a database URL.

    PostgreSQL gets a sized QueuePool; SQLite (used by tests and local
    experiments) needs a single shared connection for in-memory databases.
    """
    if database_url.startswith("sqlite"):
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "poolclass": QueuePool,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # Log SQL in debug mode
    **engine_options(settings.DATABASE_URL)
)

# expire_on_commit=False lets services return ORM rows after commit
# without another round-trip
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# Base class for all models
Base = declarative_base()


def enum_values(enum_cls):
    """Store enum columns by value ("owner") rather than member name ("OWNER")."""
    return [member.value for member in enum_cls]


@event.listens_for(engine, "connect")
def set_connection_defaults(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    cursor = dbapi_connection.cursor()
    # SQLite doesn't support SET TIME ZONE, so we skip it
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor.execute("SET TIME ZONE 'UTC'")
    cursor.close()
    logger.debug("New database connection established")


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that provides a database session.

    The session is closed after the request completes; anything not
    committed by a service is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Generator[Session, None, None]:
    """
    Run a block of writes as one unit of work.

    Commits when the block exits normally and rolls back every pending
    change when it raises, so multi-step operations never leave partial
    state behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """
    Initialize database tables.

    In production, you'd use Alembic migrations instead.
    """
    # Models must be imported so their tables are registered on Base.metadata
    import bizsuite.models  # noqa: F401

    logger.warning("init_db() called - use Alembic migrations in production!")
    Base.metadata.create_all(bind=engine)
