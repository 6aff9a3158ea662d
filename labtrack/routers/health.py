# labtrack/routers/health.py
"""
Liveness/readiness check for the kiosk and the display screen.
Reports store reachability, whether provisioning has run, and the live
head count.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from labtrack.database import get_db, load_models
from labtrack.models.log_entry import LogEntry
from labtrack.models.user import User
from labtrack.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "unknown",
        "missing_tables": [],
        "present": None,
        "open_sessions": None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"

        live = set(inspect(db.connection()).get_table_names())
        result["missing_tables"] = sorted(t for t in load_models().tables if t not in live)
        if result["missing_tables"]:
            result["status"] = "degraded"
            return result

        result["present"] = db.query(User).filter(User.logged_in.is_(True)).count()
        result["open_sessions"] = db.query(LogEntry).filter(LogEntry.time_out.is_(None)).count()
    except SQLAlchemyError as e:
        logger.error(f"Health check: store unreachable: {e}")
        result["database"] = f"error: {e.__class__.__name__}"
        result["status"] = "degraded"

    return result
