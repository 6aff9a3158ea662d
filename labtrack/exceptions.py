# labtrack/exceptions.py
"""
Typed errors raised by the core services.
Each carries a machine-readable kind and the HTTP status main.py maps it to,
so callers can render a message without parsing free text.
"""


class TrackerError(Exception):
    """Base exception for attendance/domain rule violations."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class InvalidInputError(TrackerError):
    """Missing/empty required field, malformed ID or out-of-range value."""

    kind = "invalid_input"
    status_code = 422


class DuplicateIDError(TrackerError):
    """Registration collided with an existing StudentID."""

    kind = "duplicate_id"
    status_code = 409


class NotFoundError(TrackerError):
    """No such user, card or log."""

    kind = "not_found"
    status_code = 404


class AlreadyLoggedInError(TrackerError):
    kind = "already_logged_in"
    status_code = 409


class NotLoggedInError(TrackerError):
    kind = "not_logged_in"
    status_code = 409


class HasDependentsError(TrackerError):
    """Delete blocked because log rows still reference the user."""

    kind = "has_dependents"
    status_code = 409


class StorageError(TrackerError):
    """Underlying store failure (disk, lock, driver). Never retried by the core."""

    kind = "storage_failure"
    status_code = 503
