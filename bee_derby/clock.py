"""
Converts the hour/minute/second fields of a start form into a race duration.
"""

from __future__ import annotations

import re
from typing import Union

ClockField = Union[int, str, None]

_CLOCK_PATTERN = re.compile(r"^\s*(?:(?P<h>\d+):)?(?P<m>\d+):(?P<s>\d+)\s*$")


def _field_value(value: ClockField, label: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label} value: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValueError(f"Invalid {label} value: {value!r}")
        number = int(text)
    if number < 0:
        raise ValueError(f"{label.capitalize()} must not be negative, got {number}")
    return number


def duration_from_clock(hours: ClockField = 0, minutes: ClockField = 0, seconds: ClockField = 0) -> int:
    """Total whole seconds for the given fields; empty fields count as zero."""
    total = (
        _field_value(hours, "hours") * 3600
        + _field_value(minutes, "minutes") * 60
        + _field_value(seconds, "seconds")
    )
    if total <= 0:
        raise ValueError("Race duration must be at least one second")
    return total


def parse_clock(text: str) -> int:
    """Parses ``HH:MM:SS`` or ``MM:SS``."""
    match = _CLOCK_PATTERN.match(text or "")
    if not match:
        raise ValueError(f"Expected HH:MM:SS or MM:SS, got {text!r}")
    return duration_from_clock(match.group("h"), match.group("m"), match.group("s"))
