# labtrack/routers/logs.py
"""Attendance log history + CSV export."""

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.schemas.log_entry import LogEntryOut, LogIdPath, StudentIdQuery
from labtrack.services import directory_service
from labtrack.services.export_service import export_logs_csv

router = APIRouter()


@router.get("/logs", response_model=list[LogEntryOut], summary="Recent sessions, newest first")
def list_logs(student_id: StudentIdQuery = None, limit: int = 100, db: Session = Depends(get_db)):
    return directory_service.list_logs(db, student_id=student_id, limit=max(1, min(limit, 1000)))


@router.get("/logs/export", summary="Download every session as CSV")
def export_logs(db: Session = Depends(get_db)):
    filename = f"logs-{date.today().isoformat()}.csv"
    return Response(
        content=export_logs_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/logs/{log_id}", response_model=LogEntryOut, summary="Get one session")
def get_log(log_id: LogIdPath, db: Session = Depends(get_db)):
    return directory_service.get_log(db, log_id)
