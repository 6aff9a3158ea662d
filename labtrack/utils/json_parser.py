# labtrack/utils/json_parser.py
"""
Helpers for roster bodies posted as raw bytes (no multipart wrapper).
Gradebook exports are often saved with a UTF-8 BOM, so every decode strips it.
"""

import json
from typing import Any

from labtrack.exceptions import InvalidInputError

BOM_BYTES = b"\xef\xbb\xbf"


def decode_body(raw_body: bytes) -> str:
    return raw_body.decode("utf-8-sig", errors="replace")


def load_json_body(raw_body: bytes) -> Any:
    """Parse a JSON upload. Malformed JSON is reported as invalid input."""
    try:
        return json.loads(decode_body(raw_body))
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Roster JSON is malformed: {exc.msg} (line {exc.lineno})")


def is_json_body(raw_body: bytes, content_type: str = "") -> bool:
    """Trust an explicit JSON content type, otherwise sniff the first byte."""
    if "json" in (content_type or "").lower():
        return True
    head = raw_body[len(BOM_BYTES):] if raw_body.startswith(BOM_BYTES) else raw_body
    return head.lstrip()[:1] in (b"{", b"[")
