# labtrack/services/credential_service.py
"""Admin/supervisor passwords: set (upsert) and verify."""

from sqlalchemy.orm import Session

from labtrack.config import settings
from labtrack.database import atomic
from labtrack.exceptions import InvalidInputError, NotFoundError
from labtrack.models.credential import Credential
from labtrack.models.user import User
from labtrack.utils.clock import now_ms
from labtrack.utils.ids import validate_student_id
from labtrack.utils.logger import get_logger
from labtrack.utils.security import hash_password, verify_password

logger = get_logger(__name__)


def set_credential(db: Session, student_id: int, password: str) -> None:
    student_id = validate_student_id(student_id)
    if not password or len(password) < settings.MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")

    with atomic(db):
        user = db.query(User).filter(User.student_id == student_id).first()
        if not user:
            raise NotFoundError(f"User {student_id} not found")
        tags = user.tag_set
        if not (tags.admin or tags.supervisor):
            raise InvalidInputError(f"User {student_id} is neither admin nor supervisor")

        credential = db.query(Credential).filter(Credential.student_id == student_id).first()
        if credential is None:
            credential = Credential(student_id=student_id)
            db.add(credential)
        credential.password_hash = hash_password(password)
        credential.updated_at = now_ms()

    logger.info(f"[AUTH] credential set for {student_id}")


def verify_credential(db: Session, student_id: int, password: str) -> bool:
    """False for unknown users, malformed IDs and wrong passwords alike."""
    try:
        student_id = validate_student_id(student_id)
    except InvalidInputError:
        logger.warning(f"[AUTH] verify for malformed StudentID {student_id!r}")
        return False
    credential = db.query(Credential).filter(Credential.student_id == student_id).first()
    if credential is None:
        logger.warning(f"[AUTH] verify for {student_id}: no credential")
        return False
    ok = verify_password(password, credential.password_hash)
    if not ok:
        logger.warning(f"[AUTH] verify for {student_id}: bad password")
    return ok
