# labtrack/services/roster_parser.py
"""
Parses roster uploads into RosterRow objects.
Accepts either a JSON array of roster objects or the LMS gradebook CSV export.

Gradebook CSV layout:
  Student                                    "Last, First"
  SIS User ID                                → StudentID
  Training Affirmation (Required)  (228040)  → White  when the score is 100
  BLUE TAG  (228139)                         → Blue   when the score is 1
  GREEN TAG (293966)                         → Green  when any number is recorded
  ORANGE TAG (294239)                        → Orange when any number is recorded
The "(123456)" assignment ids and doubled spaces vary between exports, so
headers are matched after stripping them. The "Points Possible" row and
the LMS test student ("Student, Test") are dropped.
"""

import csv
import io
import re
from typing import Optional

from pydantic import ValidationError

from labtrack.exceptions import InvalidInputError
from labtrack.schemas.roster import RosterRowIn
from labtrack.services.roster_service import RosterRow
from labtrack.utils.json_parser import decode_body, is_json_body, load_json_body
from labtrack.utils.logger import get_logger

logger = get_logger(__name__)

TEST_STUDENT = "student, test"
POINTS_ROW = "points possible"

COL_STUDENT = "student"
COL_SIS_ID = "sis user id"
COL_WHITE = "training affirmation (required)"
COL_BLUE = "blue tag"
COL_GREEN = "green tag"
COL_ORANGE = "orange tag"


def parse_roster(raw_body: bytes, content_type: str = "") -> list:
    """Auto-detect format and parse accordingly."""
    if not raw_body or not raw_body.strip():
        raise InvalidInputError("Roster upload is empty")
    if is_json_body(raw_body, content_type):
        return _parse_json_roster(raw_body)
    return _parse_csv_roster(raw_body)


def _normalise_header(header: str) -> str:
    header = re.sub(r"\s*\(\d+\)\s*$", "", header or "")
    return re.sub(r"\s+", " ", header).strip().lower()


def _number(value: Optional[str]) -> Optional[float]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_csv_roster(raw_body: bytes) -> list:
    text = decode_body(raw_body)
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise InvalidInputError("Roster CSV has no header row")

    columns = {}
    for header in reader.fieldnames:
        columns.setdefault(_normalise_header(header), header)
    if COL_STUDENT not in columns or COL_SIS_ID not in columns:
        raise InvalidInputError("Roster CSV must have 'Student' and 'SIS User ID' columns")

    def cell(row, key):
        header = columns.get(key)
        return (row.get(header) or "").strip() if header else ""

    rows = []
    for row in reader:
        student = cell(row, COL_STUDENT)
        if student.lower() in (TEST_STUDENT, "") or student.lower().startswith(POINTS_ROW):
            continue

        last, _, first = student.partition(",")
        rows.append(RosterRow(
            student_id=cell(row, COL_SIS_ID) or None,
            first_name=first.strip() or None,
            last_name=last.strip() or None,
            white_tag=_number(cell(row, COL_WHITE)) == 100,
            blue_tag=_number(cell(row, COL_BLUE)) == 1,
            green_tag=_number(cell(row, COL_GREEN)) is not None,
            orange_tag=_number(cell(row, COL_ORANGE)) is not None,
        ))

    logger.info(f"[ROSTER] parsed {len(rows)} CSV rows")
    return rows


def row_from_schema(row: RosterRowIn) -> RosterRow:
    """Validated request row → RosterRow; tag strings like "false" were already coerced."""
    return RosterRow(
        student_id=str(row.student_id) if row.student_id is not None else None,
        first_name=row.first_name,
        last_name=row.last_name,
        white_tag=bool(row.white_tag),
        blue_tag=bool(row.blue_tag),
        green_tag=bool(row.green_tag),
        orange_tag=bool(row.orange_tag),
    )


def _parse_json_roster(raw_body: bytes) -> list:
    data = load_json_body(raw_body)
    if isinstance(data, dict):
        data = data.get("rows")
    if not isinstance(data, list):
        raise InvalidInputError("Roster JSON must be an array of rows (or {\"rows\": [...]})")

    rows = []
    for position, item in enumerate(data):
        try:
            rows.append(row_from_schema(RosterRowIn.model_validate(item)))
        except ValidationError as exc:
            # Unusable rows are kept as empty rows so the import counts them as skipped
            logger.warning(f"[ROSTER] JSON row {position} rejected: {exc.error_count()} error(s)")
            rows.append(RosterRow(student_id=None, first_name=None, last_name=None))

    logger.info(f"[ROSTER] parsed {len(rows)} JSON rows")
    return rows
