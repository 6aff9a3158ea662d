# labtrack/utils/ids.py
"""
Identifier checks shared by services and request schemas.
StudentID and LogID are stored as SQL INTEGER, so both are capped at the
signed 64-bit maximum the store can hold.
"""

from labtrack.exceptions import InvalidInputError

MAX_ID = 2 ** 63 - 1


def validate_student_id(student_id) -> int:
    """Digit string or positive int within the store's INTEGER range."""
    if isinstance(student_id, bool):
        raise InvalidInputError("StudentID must be numeric")
    if isinstance(student_id, str):
        student_id = student_id.strip()
        if not student_id.isdigit():
            raise InvalidInputError(f"StudentID must be numeric, got {student_id!r}")
        student_id = int(student_id)
    if not isinstance(student_id, int) or student_id <= 0:
        raise InvalidInputError(f"StudentID must be a positive integer, got {student_id!r}")
    if student_id > MAX_ID:
        raise InvalidInputError(f"StudentID {student_id} is out of range")
    return student_id


def validate_log_id(log_id) -> int:
    if isinstance(log_id, bool) or not isinstance(log_id, int) or not 0 < log_id <= MAX_ID:
        raise InvalidInputError(f"LogID must be a positive integer in range, got {log_id!r}")
    return log_id
