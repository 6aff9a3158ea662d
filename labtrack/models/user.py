# labtrack/models/user.py
"""
Users table: one row per student, supervisor or administrator.
Column names match the deployed database file so older files open in place.
Tags is authoritative; the *Tag boolean columns mirror it bit by bit and are
only ever written through set_tags().
"""

from sqlalchemy import Boolean, Column, Integer, LargeBinary, String
from labtrack.database import Base
from labtrack.utils.tags import TagSet


class User(Base):
    __tablename__ = "users"

    student_id = Column("StudentID", Integer, primary_key=True, autoincrement=False)
    first_name = Column("First_Name", String)
    last_name = Column("Last_Name", String)
    tags = Column("Tags", Integer, nullable=False, default=0, server_default="0")
    logged_in = Column("Logged_In", Boolean, nullable=False, default=False, server_default="0")
    major = Column("Major", String)
    card_id = Column("CardID", String, index=True)
    photo = Column("Photo", LargeBinary)

    # Denormalized mirror of Tags, bit 0..5
    white_tag = Column("WhiteTag", Boolean, nullable=False, default=False, server_default="0")
    blue_tag = Column("BlueTag", Boolean, nullable=False, default=False, server_default="0")
    green_tag = Column("GreenTag", Boolean, nullable=False, default=False, server_default="0")
    orange_tag = Column("OrangeTag", Boolean, nullable=False, default=False, server_default="0")
    admin_tag = Column("AdminTag", Boolean, nullable=False, default=False, server_default="0")
    supervisor_tag = Column("SupervisorTag", Boolean, nullable=False, default=False, server_default="0")

    @property
    def tag_set(self) -> TagSet:
        return TagSet.from_mask(self.tags or 0)

    def set_tags(self, tags: int) -> TagSet:
        """Write the mask and every mirror column in the same unit of work."""
        tag_set = TagSet.from_mask(tags)
        self.tags = tag_set.mask
        for attr, value in tag_set.column_values().items():
            setattr(self, attr, value)
        return tag_set

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self):
        return f"<User {self.student_id} {self.full_name!r} tags={self.tags} logged_in={self.logged_in}>"
