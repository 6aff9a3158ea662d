# labtrack/models/log_entry.py
"""
Logs table: one row per attendance session.
Time_Out NULL means the session is still open. The partial unique index lets
the store itself refuse a second open row for the same user.
"""

from sqlalchemy import BigInteger, Boolean, Column, ForeignKey, Index, Integer
from labtrack.database import Base


class LogEntry(Base):
    __tablename__ = "logs"

    log_id = Column("LogID", Integer, primary_key=True, autoincrement=True)
    time_in = Column("Time_In", BigInteger, nullable=False)     # epoch ms
    time_out = Column("Time_Out", BigInteger)                   # epoch ms, NULL while open
    supervising = Column("Supervising", Boolean)
    user_id = Column(
        "User",
        Integer,
        ForeignKey("users.StudentID", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index(
            "ux_logs_one_open_session",
            user_id,
            unique=True,
            sqlite_where=time_out.is_(None),
            postgresql_where=time_out.is_(None),
        ),
        {"sqlite_autoincrement": True},
    )

    @property
    def is_open(self) -> bool:
        return self.time_out is None

    def duration_ms(self, as_of: int) -> int:
        end = self.time_out if self.time_out is not None else as_of
        return max(0, end - self.time_in)

    def __repr__(self):
        return f"<LogEntry {self.log_id} user={self.user_id} in={self.time_in} out={self.time_out}>"
