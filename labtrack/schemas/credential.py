# labtrack/schemas/credential.py
from pydantic import BaseModel, Field

from labtrack.utils.ids import MAX_ID


class CredentialSet(BaseModel):
    password: str


class CredentialVerify(BaseModel):
    student_id: int = Field(..., gt=0, le=MAX_ID)
    password: str


class VerifyOut(BaseModel):
    student_id: int
    valid: bool
