# labtrack/utils/logger.py
"""
Centralised logging configuration for the entire application.

  console + LOG_DIR/tracker.log     everything at LOG_LEVEL
  LOG_DIR/attendance.log            check-in/out, tag and roster transitions only

attendance.log is an audit trail of who came and went; it outlives the
database file if that ever has to be restored from backup.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from labtrack.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

AUDIT_LOGGERS = (
    "labtrack.services.session_service",
    "labtrack.services.roster_service",
    "labtrack.services.user_service",
)

_configured = False


class AuditFilter(logging.Filter):
    """Pass INFO+ records emitted by the attendance-changing services."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.INFO and record.name.startswith(AUDIT_LOGGERS)


def log_dir() -> str:
    path = settings.LOG_DIR
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    os.makedirs(path, exist_ok=True)
    return path


def _rotating_handler(filename: str, fmt: logging.Formatter) -> RotatingFileHandler:
    # 10 × 5MB per file
    handler = RotatingFileHandler(
        filename=os.path.join(log_dir(), filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    main_file = _rotating_handler("tracker.log", fmt)
    main_file.setLevel(LOG_LEVEL)

    audit_file = _rotating_handler("attendance.log", fmt)
    audit_file.setLevel(logging.INFO)
    audit_file.addFilter(AuditFilter())

    root = logging.getLogger()
    root.setLevel(min(logging.getLevelName(LOG_LEVEL), logging.INFO))
    for handler in (console, main_file, audit_file):
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
