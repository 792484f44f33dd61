"""System health for the admin panel."""
import os
import platform
import time
from datetime import datetime
from typing import Any, Dict

import psutil
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

STARTED_AT = time.monotonic()
MB = 1024 * 1024


def memory_stats() -> Dict[str, float]:
    """Resident memory of this process and host memory totals, in MB."""
    host = psutil.virtual_memory()
    return {
        "memory_usage_mb": round(psutil.Process().memory_info().rss / MB, 2),
        "total_memory_mb": round(host.total / MB, 2),
        "free_memory_mb": round(host.available / MB, 2),
    }


def system_health(db: Session) -> Dict[str, Any]:
    """Database round-trip latency plus basic process information."""
    db_status = "connected"
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check query failed: {e}")
        db_status = "error"
    latency_ms = round((time.perf_counter() - started) * 1000, 2)

    return {
        "status": "operational" if db_status == "connected" else "degraded",
        "uptime": int(time.monotonic() - STARTED_AT),
        "timestamp": datetime.utcnow(),
        "database": {"status": db_status, "latency_ms": latency_ms},
        "system": {
            "platform": platform.system().lower(),
            "python_version": platform.python_version(),
            "cpus": os.cpu_count() or 1,
            **memory_stats(),
        },
    }
