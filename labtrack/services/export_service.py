# labtrack/services/export_service.py
"""
CSV export of the attendance log.
Every value is quoted and the file starts with a UTF-8 BOM so spreadsheet
apps neither re-encode names nor reformat ids/timestamps.
"""

import csv
import io
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from labtrack.models.log_entry import LogEntry

BOM = "\ufeff"
HEADER = ["LogID", "StudentID", "Time_In", "Time_Out", "Supervising"]
MISSING = "N/A"


def format_timestamp(ms: Optional[int]) -> str:
    if not ms:
        return MISSING
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def export_logs_csv(db: Session) -> str:
    buf = io.StringIO()
    buf.write(BOM)
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HEADER)

    for log in db.query(LogEntry).order_by(LogEntry.log_id).all():
        writer.writerow([
            log.log_id,
            log.user_id,
            format_timestamp(log.time_in),
            format_timestamp(log.time_out),
            MISSING if log.supervising is None else int(bool(log.supervising)),
        ])
    return buf.getvalue()
