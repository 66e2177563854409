from __future__ import annotations

import logging
import re
from typing import Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import ConfigError
from .model import UNCONFIGURED, ResolvedShift, ShiftResolution

logger = logging.getLogger(__name__)

_CLOCK = r"(\d{1,2}):(\d{2})\s*([AaPp])\.?\s*[Mm]\.?"
_SHIFT_RE = re.compile(rf"^\s*{_CLOCK}\s*(?:-|–|—|to)\s*{_CLOCK}\s*$", re.IGNORECASE)


def parse_clock(hours: str, minutes: str, meridiem: str) -> int:
    """12-hour clock parts -> minutes since midnight ("12:00 AM" = 0, "12:00 PM" = 720)."""
    h = int(hours)
    m = int(minutes)
    if not 1 <= h <= 12 or not 0 <= m <= 59:
        raise ConfigError(f"Invalid clock time {hours}:{minutes} {meridiem}M")

    h %= 12
    if meridiem.upper() == "P":
        h += 12
    return h * 60 + m


def format_clock(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    h, m = divmod(minutes, 60)
    suffix = "PM" if h >= 12 else "AM"
    h12 = h % 12 or 12
    return f"{h12}:{m:02d} {suffix}"


class ShiftScheduleResolver:
    """Parses shift text such as "6:00 AM - 3:00 PM" into a ResolvedShift."""

    def resolve(self, shift_text: Optional[str]) -> ShiftResolution:
        if shift_text is None or not shift_text.strip():
            return UNCONFIGURED

        match = _SHIFT_RE.match(shift_text)
        if not match:
            raise ConfigError(f"Unparsable shift time: {shift_text!r}")

        start = parse_clock(*match.group(1, 2, 3))
        end = parse_clock(*match.group(4, 5, 6))
        return ResolvedShift(start_minutes=start, end_minutes=end)

    def resolve_or_unconfigured(self, shift_text: Optional[str], *, agent_id: Optional[int] = None) -> ShiftResolution:
        try:
            return self.resolve(shift_text)
        except ConfigError as exc:
            logger.debug("Agent %s has an invalid shift, no breaks apply: %s", agent_id, exc)
            return UNCONFIGURED
