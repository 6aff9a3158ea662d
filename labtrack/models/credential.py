# labtrack/models/credential.py
"""
Passwords table: one salted hash per privileged user (admin/supervisor).
The plaintext is never stored or returned.
"""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String
from labtrack.database import Base


class Credential(Base):
    __tablename__ = "passwords"

    student_id = Column(
        "StudentID",
        Integer,
        ForeignKey("users.StudentID", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
        autoincrement=False,
    )
    password_hash = Column("Hash", String, nullable=False)
    updated_at = Column("Updated_At", BigInteger)   # epoch ms

    def __repr__(self):
        return f"<Credential {self.student_id}>"
