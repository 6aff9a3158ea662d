# labtrack/services/session_service.py
"""
Attendance session engine.

A user is either NotLoggedIn or LoggedIn. check_in opens a LogEntry
(Time_Out NULL) and sets Logged_In; check_out closes the open LogEntry and
clears Logged_In. Each transition is one transaction: read current state,
write new state, commit. Any failure rolls back the whole step.

At most one open LogEntry per user:
  - check_in refuses when an open row already exists (AlreadyLoggedIn)
  - the partial unique index ux_logs_one_open_session stops a racing
    double check-in that read the state before the first one committed
"""

from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from labtrack.database import atomic
from labtrack.exceptions import (
    AlreadyLoggedInError,
    InvalidInputError,
    NotFoundError,
    NotLoggedInError,
    StorageError,
)
from labtrack.models.log_entry import LogEntry
from labtrack.models.user import User
from labtrack.utils.clock import now_ms
from labtrack.utils.ids import validate_student_id
from labtrack.utils.logger import get_logger
from labtrack.utils.tags import validate_mask

logger = get_logger(__name__)

CHECKED_IN = "checked_in"
CHECKED_OUT = "checked_out"


def _lock_user(db: Session, student_id: int) -> User:
    user = (
        db.query(User)
        .filter(User.student_id == student_id)
        .with_for_update()          # no-op on SQLite, row lock elsewhere
        .first()
    )
    if not user:
        raise NotFoundError(f"User {student_id} not found")
    return user


def _user_by_card(db: Session, card_id: str) -> User:
    card_id = (card_id or "").strip()
    if not card_id:
        raise InvalidInputError("CardID is required")
    user = db.query(User).filter(User.card_id == card_id).first()
    if not user:
        raise NotFoundError(f"No user holds card {card_id}")
    return user


def get_open_session(db: Session, student_id: int) -> Optional[LogEntry]:
    student_id = validate_student_id(student_id)
    return (
        db.query(LogEntry)
        .filter(LogEntry.user_id == student_id, LogEntry.time_out.is_(None))
        .order_by(LogEntry.time_in.desc())
        .first()
    )


def _open_session_exists(db: Session, student_id: int) -> bool:
    return (
        db.query(LogEntry.log_id)
        .filter(LogEntry.user_id == student_id, LogEntry.time_out.is_(None))
        .first()
    ) is not None


def check_in(db: Session, student_id: int, supervising: Optional[bool] = None,
             now: Optional[int] = None) -> LogEntry:
    student_id = validate_student_id(student_id)
    now = now if now is not None else now_ms()
    try:
        with atomic(db, passthrough=(IntegrityError,)):
            user = _lock_user(db, student_id)
            if get_open_session(db, student_id) is not None:
                logger.warning(f"[SESSION] {student_id} check-in refused: already logged in")
                raise AlreadyLoggedInError(f"User {student_id} is already logged in")

            log = LogEntry(
                user_id=student_id,
                time_in=now,
                time_out=None,
                supervising=supervising,
            )
            db.add(log)
            user.logged_in = True
            db.flush()
    except IntegrityError as exc:
        # The store refused the row; what is there now tells us why
        if _open_session_exists(db, student_id):
            logger.warning(f"[SESSION] {student_id} concurrent check-in rejected by open-session index")
            raise AlreadyLoggedInError(f"User {student_id} is already logged in")
        if db.query(User.student_id).filter(User.student_id == student_id).first() is None:
            logger.warning(f"[SESSION] {student_id} check-in failed: user was removed meanwhile")
            raise NotFoundError(f"User {student_id} not found")
        logger.error(f"[SESSION] {student_id} check-in failed: {exc}")
        raise StorageError(f"Storage failure: {exc.__class__.__name__}") from exc

    db.refresh(log)
    logger.info(f"[SESSION] {student_id} checked in (log {log.log_id}, supervising={supervising})")
    return log


def check_out(db: Session, student_id: int, now: Optional[int] = None) -> LogEntry:
    student_id = validate_student_id(student_id)
    now = now if now is not None else now_ms()
    with atomic(db):
        user = _lock_user(db, student_id)
        log = get_open_session(db, student_id)
        if log is None:
            stale = bool(user.logged_in)
            if stale:
                # Flag says present but no open row: repair the flag, still report the error
                user.logged_in = False
                db.commit()
                logger.warning(f"[SESSION] {student_id} had Logged_In set without an open log; cleared")
            logger.warning(f"[SESSION] {student_id} check-out refused: not logged in")
            raise NotLoggedInError(f"User {student_id} is not logged in")

        log.time_out = max(now, log.time_in)
        user.logged_in = False

    db.refresh(log)
    logger.info(f"[SESSION] {student_id} checked out (log {log.log_id}, {log.time_out - log.time_in} ms)")
    return log


def toggle(db: Session, student_id: int, supervising: Optional[bool] = None,
           now: Optional[int] = None) -> Tuple[str, LogEntry]:
    """Kiosk swipe: close the open session if there is one, otherwise open one."""
    student_id = validate_student_id(student_id)
    if get_open_session(db, student_id) is not None:
        return CHECKED_OUT, check_out(db, student_id, now=now)
    return CHECKED_IN, check_in(db, student_id, supervising=supervising, now=now)


def check_in_by_card(db: Session, card_id: str, supervising: Optional[bool] = None,
                     now: Optional[int] = None) -> LogEntry:
    return check_in(db, _user_by_card(db, card_id).student_id, supervising=supervising, now=now)


def check_out_by_card(db: Session, card_id: str, now: Optional[int] = None) -> LogEntry:
    return check_out(db, _user_by_card(db, card_id).student_id, now=now)


def toggle_by_card(db: Session, card_id: str, supervising: Optional[bool] = None,
                   now: Optional[int] = None) -> Tuple[str, LogEntry]:
    return toggle(db, _user_by_card(db, card_id).student_id, supervising=supervising, now=now)


def edit_tags(db: Session, student_id: int, tags: int) -> User:
    student_id = validate_student_id(student_id)
    tags = validate_mask(tags)
    with atomic(db):
        user = _lock_user(db, student_id)
        previous = user.tags
        user.set_tags(tags)

    db.refresh(user)
    logger.info(f"[TAGS] {student_id}: {previous} → {user.tags}")
    return user
