# labtrack/utils/clock.py
"""Epoch-millisecond clock used for Time_In / Time_Out."""

import time

MS_PER_HOUR = 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_hours(ms: int) -> float:
    return ms / MS_PER_HOUR
