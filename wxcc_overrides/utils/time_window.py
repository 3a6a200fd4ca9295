"""
Time window utilities for WxCC override schedules

WxCC expects every override start/end and container lastModifiedTime in the
form yyyy-MM-ddTHH:mm (minute precision, no seconds, no zone designator).
Values are normalized to UTC before formatting.

Nothing here reads the clock except utc_now(); callers pass "now" explicitly.
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

from ..errors import InvalidTimestamp

_WIRE_FORMAT_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")

InstantLike = Union[str, datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: InstantLike) -> datetime:
    """
    Parse an ISO-8601-like string or datetime into an aware UTC datetime.

    Naive values (including the WxCC wire format) are taken as UTC.

    Raises:
        InvalidTimestamp: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestamp(value)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidTimestamp(value) from e
    else:
        raise InvalidTimestamp(value)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        # Offset pushes the instant past year 1 or 9999
        raise InvalidTimestamp(value) from e


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True if window A starts before B ends and ends after B starts (touching is not overlap)"""
    return a_start < b_end and a_end > b_start


def is_within(instant: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive interval membership"""
    return start <= instant <= end


def to_wire_format(value: InstantLike) -> str:
    """Convert an ISO string or datetime to WxCC format: yyyy-MM-ddTHH:mm"""
    # isoformat zero-pads years below 1000, strftime("%Y") does not on every platform
    return parse_instant(value).replace(tzinfo=None).isoformat(timespec="minutes")


def safe_to_wire_format(value: InstantLike, fallback: Optional[str] = None) -> str:
    """Convert to WxCC format, returning fallback on failure when one is given"""
    try:
        return to_wire_format(value)
    except InvalidTimestamp:
        if fallback is not None:
            return fallback
        raise


def convert_fields_to_wire(obj: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    """Return a copy of obj with the named date fields converted to WxCC format"""
    converted = dict(obj)
    for field in fields:
        if converted.get(field):
            converted[field] = to_wire_format(converted[field])
    return converted


def is_wire_format(value: Any) -> bool:
    """Check a value matches yyyy-MM-ddTHH:mm exactly"""
    return isinstance(value, str) and bool(_WIRE_FORMAT_RE.match(value))
