# labtrack/services/directory_service.py
"""
Read-only projections over users and logs: lookups, search, the
"who is here now" display partition and accumulated hours.
Nothing in this module writes to the store.
"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.exceptions import InvalidInputError, NotFoundError
from labtrack.models.log_entry import LogEntry
from labtrack.models.user import User
from labtrack.utils.clock import ms_to_hours, now_ms
from labtrack.utils.ids import validate_log_id, validate_student_id


@dataclass
class Presence:
    admins: list = field(default_factory=list)
    supervisors: list = field(default_factory=list)
    students: list = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.admins) + len(self.supervisors) + len(self.students)


def get_user(db: Session, student_id: int) -> User:
    student_id = validate_student_id(student_id)
    user = db.query(User).filter(User.student_id == student_id).first()
    if not user:
        raise NotFoundError(f"User {student_id} not found")
    return user


def get_user_by_card(db: Session, card_id: str) -> User:
    card_id = (card_id or "").strip()
    if not card_id:
        raise InvalidInputError("CardID is required")
    user = db.query(User).filter(User.card_id == card_id).first()
    if not user:
        raise NotFoundError(f"No user holds card {card_id}")
    return user


def get_log(db: Session, log_id: int) -> LogEntry:
    log_id = validate_log_id(log_id)
    log = db.query(LogEntry).filter(LogEntry.log_id == log_id).first()
    if not log:
        raise NotFoundError(f"Log {log_id} not found")
    return log


def list_logs(db: Session, student_id: Optional[int] = None, limit: int = 100) -> list:
    q = db.query(LogEntry)
    if student_id is not None:
        student_id = validate_student_id(student_id)
        q = q.filter(LogEntry.user_id == student_id)
    return q.order_by(LogEntry.time_in.desc(), LogEntry.log_id.desc()).limit(limit).all()


def search(db: Session, query: str) -> list:
    """
    Case-insensitive substring match on first name, last name, "first last"
    or the StudentID digits. % and _ in the query match literally.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return []

    full_name = func.coalesce(User.first_name, "") + " " + func.coalesce(User.last_name, "")
    return (
        db.query(User)
        .filter(or_(
            func.lower(User.first_name).contains(needle, autoescape=True),
            func.lower(User.last_name).contains(needle, autoescape=True),
            func.lower(full_name).contains(needle, autoescape=True),
            cast(User.student_id, String).contains(needle, autoescape=True),
        ))
        .order_by(User.last_name, User.first_name, User.student_id)
        .all()
    )


def list_present(db: Session) -> Presence:
    """
    Partition logged-in users into three disjoint buckets:
      admins       Admin tag (wins over Supervisor)
      supervisors  Supervisor tag AND the open session was opened supervising
      students     everyone else who is logged in
    The bootstrap account never shows up as a supervisor.
    """
    rows = (
        db.query(User, LogEntry.supervising)
        .outerjoin(
            LogEntry,
            (LogEntry.user_id == User.student_id) & LogEntry.time_out.is_(None),
        )
        .filter(User.logged_in.is_(True))
        .order_by(User.last_name, User.first_name, User.student_id)
        .all()
    )

    presence = Presence()
    seen = set()
    for user, supervising in rows:
        if user.student_id in seen:
            continue
        seen.add(user.student_id)

        tags = user.tag_set
        if tags.admin:
            presence.admins.append(user)
        elif tags.supervisor and supervising and user.student_id != settings.BOOTSTRAP_ADMIN_ID:
            presence.supervisors.append(user)
        else:
            presence.students.append(user)
    return presence


def total_hours(db: Session, student_id: int, as_of: Optional[int] = None) -> float:
    """Hours across all sessions; an open session counts up to as_of (default now)."""
    student_id = get_user(db, student_id).student_id
    as_of = as_of if as_of is not None else now_ms()

    logs = db.query(LogEntry).filter(LogEntry.user_id == student_id).all()
    return ms_to_hours(sum(log.duration_ms(as_of) for log in logs))
