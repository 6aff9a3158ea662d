# labtrack/schemas/roster.py
from pydantic import BaseModel, Field
from typing import Optional, Union


class RosterRowIn(BaseModel):
    # Identity fields are optional here: incomplete rows are counted as skipped, not rejected
    student_id: Optional[Union[int, str]] = Field(None, alias="StudentID")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    white_tag: Optional[bool] = Field(False, alias="whiteTag")
    blue_tag: Optional[bool] = Field(False, alias="blueTag")
    green_tag: Optional[bool] = Field(False, alias="greenTag")
    orange_tag: Optional[bool] = Field(False, alias="orangeTag")

    class Config:
        populate_by_name = True


class RosterImport(BaseModel):
    rows: list[RosterRowIn]


class ImportResultOut(BaseModel):
    added: int
    updated: int
    skipped: int
