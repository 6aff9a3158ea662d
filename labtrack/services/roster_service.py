# labtrack/services/roster_service.py
"""
Roster import: bulk upsert of students and their training tags.

Each valid row is diffed against the stored user:
  unknown StudentID            → insert            (added)
  any training tag differs     → rewrite the tags  (updated)
  identical training tags      → nothing           (skipped)
Rows missing StudentID / first name / last name are skipped, never fatal.

Rows are written in chunks of IMPORT_BATCH_SIZE, one transaction per chunk.
Admin and Supervisor bits of existing users are preserved.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.database import atomic
from labtrack.exceptions import InvalidInputError
from labtrack.models.user import User
from labtrack.utils.ids import validate_student_id
from labtrack.utils.logger import get_logger
from labtrack.utils.tags import TagSet

logger = get_logger(__name__)


@dataclass
class RosterRow:
    student_id: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    white_tag: bool = False
    blue_tag: bool = False
    green_tag: bool = False
    orange_tag: bool = False

    @property
    def training(self) -> tuple:
        return (bool(self.white_tag), bool(self.blue_tag), bool(self.green_tag), bool(self.orange_tag))


@dataclass
class ImportResult:
    added: int = 0
    updated: int = 0
    skipped: int = 0

    def as_dict(self) -> dict:
        return {"added": self.added, "updated": self.updated, "skipped": self.skipped}


def _normalise(row: RosterRow) -> Optional[tuple]:
    """(student_id, first, last, training) or None when the row is unusable."""
    first = (row.first_name or "").strip()
    last = (row.last_name or "").strip()
    if row.student_id is None or not first or not last:
        return None
    try:
        student_id = validate_student_id(row.student_id)
    except InvalidInputError:
        return None
    return student_id, first, last, row.training


def _chunks(items: list, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def import_roster(db: Session, rows: Iterable[RosterRow], batch_size: Optional[int] = None) -> ImportResult:
    result = ImportResult()
    batch_size = max(1, batch_size or settings.IMPORT_BATCH_SIZE)

    valid = []
    for row in rows:
        normalised = _normalise(row)
        if normalised is None:
            result.skipped += 1
            continue
        valid.append(normalised)

    for chunk in _chunks(valid, batch_size):
        added, updated, skipped = _reconcile_chunk(db, chunk)
        result.added += added
        result.updated += updated
        result.skipped += skipped

    logger.info(f"[ROSTER] import done: added={result.added} updated={result.updated} skipped={result.skipped}")
    return result


def _existing_users(db: Session, ids: list) -> dict:
    return {user.student_id: user for user in db.query(User).filter(User.student_id.in_(ids)).all()}


def _reconcile_chunk(db: Session, chunk: list) -> tuple:
    """
    One transaction per chunk. A concurrent import inserting the same new
    StudentID makes the commit fail; that surfaces as StorageError and only
    this chunk is rolled back.
    """
    added = updated = skipped = 0
    ids = sorted({student_id for student_id, _, _, _ in chunk})

    with atomic(db):
        existing = _existing_users(db, ids)

        for student_id, first, last, training in chunk:
            user = existing.get(student_id)
            if user is None:
                user = User(student_id=student_id, first_name=first, last_name=last, logged_in=False)
                user.set_tags(TagSet().with_training(*training).mask)
                db.add(user)
                existing[student_id] = user
                added += 1
                continue

            mirrored = (bool(user.white_tag), bool(user.blue_tag), bool(user.green_tag), bool(user.orange_tag))
            if mirrored == training and user.tag_set.training == training:
                skipped += 1
                continue

            user.set_tags(user.tag_set.with_training(*training).mask)
            updated += 1

    logger.debug(f"[ROSTER] chunk of {len(chunk)}: +{added} ~{updated} ={skipped}")
    return added, updated, skipped
