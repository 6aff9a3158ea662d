# labtrack/schemas/user.py
from fastapi import Path
from pydantic import BaseModel, Field
from typing import Annotated, Optional

from labtrack.utils.ids import MAX_ID

# Bounded so an out-of-range id is a 422, never a driver overflow
StudentIdPath = Annotated[int, Path(gt=0, le=MAX_ID)]


class UserCreate(BaseModel):
    student_id: int = Field(..., gt=0, le=MAX_ID)
    first_name: str
    last_name: str
    tags: int = Field(0, ge=0)


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tags: Optional[int] = Field(None, ge=0)


class TagsUpdate(BaseModel):
    tags: int = Field(..., ge=0)


class MajorUpdate(BaseModel):
    major: str
    other: Optional[str] = None   # free text when major == "Other"


class CardUpdate(BaseModel):
    card_id: str


class UserOut(BaseModel):
    student_id: int
    first_name: Optional[str]
    last_name: Optional[str]
    tags: int
    logged_in: bool
    major: Optional[str] = None
    card_id: Optional[str] = None
    white_tag: bool
    blue_tag: bool
    green_tag: bool
    orange_tag: bool
    admin_tag: bool
    supervisor_tag: bool

    class Config:
        from_attributes = True


class HoursOut(BaseModel):
    student_id: int
    total_hours: float
    as_of: int   # epoch ms
