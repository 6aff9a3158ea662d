# labtrack/schemas/log_entry.py
from fastapi import Path, Query
from pydantic import BaseModel, Field, model_validator
from typing import Annotated, Optional

from labtrack.utils.ids import MAX_ID

LogIdPath = Annotated[int, Path(gt=0, le=MAX_ID)]
StudentIdQuery = Annotated[Optional[int], Query(gt=0, le=MAX_ID)]


class LogEntryOut(BaseModel):
    log_id: int
    user_id: int
    time_in: int                  # epoch ms
    time_out: Optional[int]       # epoch ms, null while the session is open
    supervising: Optional[bool]

    class Config:
        from_attributes = True


class _IdentifiedRequest(BaseModel):
    """Identify the user by StudentID or by card swipe, never both."""
    student_id: Optional[int] = Field(None, gt=0, le=MAX_ID)
    card_id: Optional[str] = None

    @model_validator(mode="after")
    def _one_identifier(self):
        if (self.student_id is None) == (not self.card_id):
            raise ValueError("Provide exactly one of student_id or card_id")
        return self


class CheckInRequest(_IdentifiedRequest):
    supervising: Optional[bool] = None


class CheckOutRequest(_IdentifiedRequest):
    pass


class SwipeRequest(_IdentifiedRequest):
    supervising: Optional[bool] = None


class SwipeOut(BaseModel):
    action: str                   # checked_in | checked_out
    log: LogEntryOut
