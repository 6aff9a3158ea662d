# labtrack/routers/admin.py
"""Schema provisioning endpoint (also run automatically at startup)."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.services.schema_service import ensure_schema

router = APIRouter()


@router.post("/admin/schema", summary="Ensure tables, columns and bootstrap admin exist")
def provision_schema(db: Session = Depends(get_db)):
    """Idempotent: a second call reports no changes."""
    report = ensure_schema(db)
    return {"status": "ok", "changed": report.changed, **asdict(report)}
