# labtrack/services/user_service.py
"""
User registration and admin profile edits (names, major, card, photo),
plus the guarded delete.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from labtrack.database import atomic
from labtrack.exceptions import (
    DuplicateIDError,
    HasDependentsError,
    InvalidInputError,
    NotFoundError,
)
from labtrack.models.credential import Credential
from labtrack.models.log_entry import LogEntry
from labtrack.models.user import User
from labtrack.utils.ids import validate_student_id
from labtrack.utils.logger import get_logger
from labtrack.utils.tags import validate_mask

logger = get_logger(__name__)

OTHER_MAJOR = "Other"


def _require_text(value: Optional[str], field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInputError(f"{field_name} is required")
    return value


def _get(db: Session, student_id) -> User:
    student_id = validate_student_id(student_id)
    user = db.query(User).filter(User.student_id == student_id).first()
    if not user:
        raise NotFoundError(f"User {student_id} not found")
    return user


def register_user(db: Session, student_id, first_name: str, last_name: str, tags: int = 0) -> User:
    student_id = validate_student_id(student_id)
    first_name = _require_text(first_name, "First name")
    last_name = _require_text(last_name, "Last name")
    tags = validate_mask(tags if tags is not None else 0)

    if db.query(User).filter(User.student_id == student_id).first() is not None:
        raise DuplicateIDError(f"User {student_id} already exists")

    user = User(student_id=student_id, first_name=first_name, last_name=last_name, logged_in=False)
    user.set_tags(tags)
    try:
        with atomic(db, passthrough=(IntegrityError,)):
            db.add(user)
    except IntegrityError:
        raise DuplicateIDError(f"User {student_id} already exists")

    db.refresh(user)
    logger.info(f"[USER] registered {student_id} ({user.full_name}) tags={user.tags}")
    return user


def update_user(db: Session, student_id: int, first_name: Optional[str] = None,
                last_name: Optional[str] = None, tags: Optional[int] = None) -> User:
    """Admin update; only the fields passed are changed."""
    if first_name is not None:
        first_name = _require_text(first_name, "First name")
    if last_name is not None:
        last_name = _require_text(last_name, "Last name")
    if tags is not None:
        tags = validate_mask(tags)

    with atomic(db):
        user = _get(db, student_id)
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if tags is not None:
            user.set_tags(tags)

    db.refresh(user)
    logger.info(f"[USER] updated {student_id}")
    return user


def set_major(db: Session, student_id: int, major: str, other: Optional[str] = None) -> User:
    major = _require_text(major, "Major")
    if major == OTHER_MAJOR:
        major = _require_text(other, "Major (other)")

    with atomic(db):
        user = _get(db, student_id)
        user.major = major

    db.refresh(user)
    logger.info(f"[USER] {student_id} major={major!r}")
    return user


def set_card_id(db: Session, student_id: int, card_id: str) -> User:
    card_id = _require_text(card_id, "CardID")

    with atomic(db):
        user = _get(db, student_id)
        holder = (
            db.query(User)
            .filter(User.card_id == card_id, User.student_id != user.student_id)
            .first()
        )
        if holder is not None:
            raise InvalidInputError(f"Card {card_id} is already assigned to user {holder.student_id}")
        user.card_id = card_id

    db.refresh(user)
    logger.info(f"[USER] {student_id} card bound")
    return user


def set_photo(db: Session, student_id: int, data: bytes) -> User:
    if not data:
        raise InvalidInputError("Photo payload is empty")

    with atomic(db):
        user = _get(db, student_id)
        user.photo = bytes(data)

    logger.info(f"[USER] {student_id} photo stored ({len(data)} bytes)")
    return user


def get_photo(db: Session, student_id: int) -> bytes:
    user = _get(db, student_id)
    if not user.photo:
        raise NotFoundError(f"User {student_id} has no photo")
    return user.photo


def delete_user(db: Session, student_id: int) -> None:
    """
    Refused while any log row references the user. The user's credential
    row, if any, is removed in the same transaction.
    """
    try:
        with atomic(db, passthrough=(IntegrityError,)):
            user = _get(db, student_id)
            log_count = db.query(LogEntry).filter(LogEntry.user_id == user.student_id).count()
            if log_count:
                raise HasDependentsError(f"User {student_id} has {log_count} log entries and cannot be deleted")

            db.query(Credential).filter(Credential.student_id == user.student_id).delete(synchronize_session=False)
            db.delete(user)
    except IntegrityError:
        # A log row was written between the count and the delete
        raise HasDependentsError(f"User {student_id} has log entries and cannot be deleted")

    logger.info(f"[USER] deleted {student_id}")
