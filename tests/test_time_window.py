from datetime import datetime, timedelta, timezone

import pytest

from wxcc_overrides.errors import InvalidTimestamp
from wxcc_overrides.utils.time_window import (
    convert_fields_to_wire,
    is_wire_format,
    is_within,
    overlaps,
    parse_instant,
    safe_to_wire_format,
    to_wire_format,
)


def at(hour, minute=0):
    return datetime(2025, 1, 15, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ((at(8), at(16)), (at(12), at(20)), True),
        ((at(8), at(12)), (at(13), at(17)), False),
        ((at(9), at(10)), (at(8), at(18)), True),
    ],
)
def test_overlaps_is_symmetric(a, b, expected):
    assert overlaps(*a, *b) is expected
    assert overlaps(*b, *a) is expected


def test_identical_windows_overlap():
    assert overlaps(at(8), at(12), at(8), at(12))


def test_touching_windows_do_not_overlap():
    assert not overlaps(at(8), at(12), at(12), at(16))
    assert not overlaps(at(12), at(16), at(8), at(12))


def test_is_within_is_inclusive_at_both_ends():
    assert is_within(at(8), at(8), at(12))
    assert is_within(at(12), at(8), at(12))
    assert not is_within(at(12, 1), at(8), at(12))


def test_parse_instant_treats_naive_values_as_utc():
    assert parse_instant("2025-01-15T09:30") == at(9, 30)
    assert parse_instant(datetime(2025, 1, 15, 9, 30)) == at(9, 30)


def test_parse_instant_normalizes_offsets_to_utc():
    assert parse_instant("2025-01-15T10:30:00+01:00") == at(9, 30)
    assert parse_instant("2025-01-15T09:30:00.000Z") == at(9, 30)


def test_parse_instant_accepts_compact_offsets_and_short_fractions():
    assert parse_instant("2025-01-15T09:30:00+0000") == at(9, 30)
    assert parse_instant("2025-01-15T09:30:00.5Z").replace(microsecond=0) == at(9, 30)


@pytest.mark.parametrize("value", ["0001-01-01T00:00+05:00", "9999-12-31T23:59-05:00"])
def test_parse_instant_rejects_offsets_past_supported_years(value):
    with pytest.raises(InvalidTimestamp):
        parse_instant(value)


@pytest.mark.parametrize("value", ["", "not-a-date", "2025-13-45T99:00", None, 12345])
def test_parse_instant_rejects_garbage(value):
    with pytest.raises(InvalidTimestamp):
        parse_instant(value)


def test_invalid_timestamp_is_a_value_error():
    with pytest.raises(ValueError):
        parse_instant("yesterday")


def test_to_wire_format_drops_seconds_and_zone():
    assert to_wire_format("2025-01-15T09:30:45.123Z") == "2025-01-15T09:30"
    assert to_wire_format("2025-01-15T04:30:00-05:00") == "2025-01-15T09:30"
    assert to_wire_format(at(9, 30) + timedelta(seconds=59)) == "2025-01-15T09:30"


def test_to_wire_format_is_stable_on_wire_values():
    assert to_wire_format("2025-01-15T09:30") == "2025-01-15T09:30"


def test_to_wire_format_pads_early_years():
    assert to_wire_format("0001-01-01T00:00") == "0001-01-01T00:00"
    assert to_wire_format("0999-06-01T08:15") == "0999-06-01T08:15"


def test_safe_to_wire_format_uses_fallback_only_when_given():
    assert safe_to_wire_format("junk", fallback="2025-01-01T00:00") == "2025-01-01T00:00"
    with pytest.raises(InvalidTimestamp):
        safe_to_wire_format("junk")


def test_convert_fields_to_wire_leaves_other_fields_alone():
    obj = {"name": "agent-a", "startDateTime": "2025-01-15T09:30:00Z", "endDateTime": None}

    converted = convert_fields_to_wire(obj, ["startDateTime", "endDateTime"])

    assert converted == {"name": "agent-a", "startDateTime": "2025-01-15T09:30", "endDateTime": None}
    assert obj["startDateTime"] == "2025-01-15T09:30:00Z"


def test_is_wire_format():
    assert is_wire_format("2025-01-15T09:30")
    assert not is_wire_format("2025-01-15T09:30:00")
    assert not is_wire_format("2025-01-15 09:30")
    assert not is_wire_format(None)
