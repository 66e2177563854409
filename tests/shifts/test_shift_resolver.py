from __future__ import annotations

import pytest

from src.break_scheduler.break_scheduler.core.enums import ShiftKind
from src.break_scheduler.break_scheduler.core.exceptions import ConfigError
from src.break_scheduler.break_scheduler.shifts.model import UNCONFIGURED, ResolvedShift
from src.break_scheduler.break_scheduler.shifts.resolver import ShiftScheduleResolver, format_clock, parse_clock


def test_resolve_day_shift():
    shift = ShiftScheduleResolver().resolve("6:00 AM - 3:00 PM")

    assert shift == ResolvedShift(start_minutes=360, end_minutes=900)
    assert shift.kind == ShiftKind.DAY
    assert shift.duration_minutes == 540
    assert not shift.is_overnight


def test_resolve_overnight_shift_wraps_past_midnight():
    shift = ShiftScheduleResolver().resolve("10:00 PM - 6:00 AM")

    assert shift.start_minutes == 1320
    assert shift.end_minutes == 360
    assert shift.is_overnight
    assert shift.kind == ShiftKind.NIGHT
    assert shift.duration_minutes == 480


@pytest.mark.parametrize(
    "text",
    [
        "6:00 am-3:00 pm",
        "  6:00 A.M. to 3:00 P.M.  ",
        "6:00AM – 3:00PM",
        "06:00 AM — 03:00 PM",
    ],
)
def test_resolve_accepts_common_spellings(text):
    assert ShiftScheduleResolver().resolve(text) == ResolvedShift(start_minutes=360, end_minutes=900)


def test_twelve_oclock_edges():
    assert parse_clock("12", "00", "A") == 0
    assert parse_clock("12", "30", "p") == 750
    assert parse_clock("11", "59", "P") == 1439


@pytest.mark.parametrize("text", [None, "", "   "])
def test_missing_shift_is_unconfigured(text):
    result = ShiftScheduleResolver().resolve(text)

    assert result is UNCONFIGURED
    assert not result


@pytest.mark.parametrize("text", ["morning", "6 AM - 3 PM", "13:00 PM - 3:00 PM", "6:75 AM - 3:00 PM", "6:00 - 15:00"])
def test_invalid_shift_raises_config_error(text):
    with pytest.raises(ConfigError):
        ShiftScheduleResolver().resolve(text)


def test_resolve_or_unconfigured_swallows_config_error():
    resolver = ShiftScheduleResolver()

    assert resolver.resolve_or_unconfigured("garbage", agent_id=7) is UNCONFIGURED
    assert resolver.resolve_or_unconfigured("8:00 AM - 5:00 PM", agent_id=7) == ResolvedShift(480, 1020)


def test_format_clock_wraps_and_uses_12_hour_clock():
    assert format_clock(0) == "12:00 AM"
    assert format_clock(900) == "3:00 PM"
    assert format_clock(1320 + 120) == "12:00 AM"
    assert format_clock(360 + 420) == "1:00 PM"
