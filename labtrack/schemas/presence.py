# labtrack/schemas/presence.py
from pydantic import BaseModel
from labtrack.schemas.user import UserOut


class PresenceOut(BaseModel):
    admins: list[UserOut]
    supervisors: list[UserOut]
    students: list[UserOut]
    total: int

    class Config:
        from_attributes = True
