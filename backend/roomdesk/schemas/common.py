from __future__ import annotations

import re

TIME_PATTERN: re.Pattern[str] = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::00)?$")
TIME_FORMAT_MESSAGE = "Time must be in HH:MM 24-hour format"


def parse_time_to_minutes(value: str) -> int:
    """Minutes since midnight for ``HH:MM`` (``HH:MM:00`` as stored by Postgres is accepted too)."""
    if not isinstance(value, str):
        raise ValueError(TIME_FORMAT_MESSAGE)
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(TIME_FORMAT_MESSAGE)
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def normalize_time(value: str) -> str:
    return minutes_to_time(parse_time_to_minutes(value))
