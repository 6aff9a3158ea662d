# labtrack/routers/roster.py
"""
Roster import endpoints.
POST /roster/import       JSON body {"rows": [...]}
POST /roster/import/file  raw gradebook CSV (or JSON array) as the request body
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.schemas.roster import ImportResultOut, RosterImport
from labtrack.services.roster_parser import parse_roster, row_from_schema
from labtrack.services.roster_service import import_roster
from labtrack.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/roster/import", response_model=ImportResultOut, summary="Reconcile roster rows")
def import_rows(body: RosterImport, db: Session = Depends(get_db)):
    rows = [row_from_schema(r) for r in body.rows]
    return import_roster(db, rows).as_dict()


@router.post("/roster/import/file", response_model=ImportResultOut, summary="Import a gradebook export")
async def import_file(request: Request, db: Session = Depends(get_db)):
    raw_body = await request.body()
    content_type = request.headers.get("content-type", "")
    logger.info(f"Roster upload | {len(raw_body)} bytes | {content_type}")

    rows = parse_roster(raw_body, content_type)
    return import_roster(db, rows).as_dict()
