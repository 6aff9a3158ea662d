# labtrack/routers/sessions.py
"""
Kiosk endpoints: check in, check out, swipe (toggle) and the public
"currently present" display feed.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.schemas.log_entry import (
    CheckInRequest,
    CheckOutRequest,
    LogEntryOut,
    SwipeOut,
    SwipeRequest,
)
from labtrack.schemas.presence import PresenceOut
from labtrack.schemas.user import UserOut
from labtrack.services import directory_service, session_service

router = APIRouter()


@router.post("/sessions/check-in", response_model=LogEntryOut, summary="Open a session")
def check_in(body: CheckInRequest, db: Session = Depends(get_db)):
    if body.card_id:
        return session_service.check_in_by_card(db, body.card_id, supervising=body.supervising)
    return session_service.check_in(db, body.student_id, supervising=body.supervising)


@router.post("/sessions/check-out", response_model=LogEntryOut, summary="Close the open session")
def check_out(body: CheckOutRequest, db: Session = Depends(get_db)):
    if body.card_id:
        return session_service.check_out_by_card(db, body.card_id)
    return session_service.check_out(db, body.student_id)


@router.post("/sessions/swipe", response_model=SwipeOut, summary="Toggle in/out (card reader)")
def swipe(body: SwipeRequest, db: Session = Depends(get_db)):
    if body.card_id:
        action, log = session_service.toggle_by_card(db, body.card_id, supervising=body.supervising)
    else:
        action, log = session_service.toggle(db, body.student_id, supervising=body.supervising)
    return {"action": action, "log": LogEntryOut.model_validate(log)}


@router.get("/present", response_model=PresenceOut, summary="Who is in the space right now")
def list_present(db: Session = Depends(get_db)):
    presence = directory_service.list_present(db)
    return PresenceOut(
        admins=[UserOut.model_validate(u) for u in presence.admins],
        supervisors=[UserOut.model_validate(u) for u in presence.supervisors],
        students=[UserOut.model_validate(u) for u in presence.students],
        total=presence.total,
    )
