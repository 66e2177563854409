from __future__ import annotations

from ..core.enums import BreakType, ReminderKind
from ..shifts.resolver import format_clock


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def render(
    kind: ReminderKind,
    break_type: BreakType,
    *,
    minutes_until_start: int = 0,
    minutes_until_end: int = 0,
    minutes_elapsed: int = 0,
    window_end_minutes: int = 0,
) -> tuple[str, str]:
    """(title, message) shown to the agent for one notification."""

    name = break_type.display_name

    if kind == ReminderKind.AVAILABLE_SOON:
        return (
            f"{_capitalize(name)} available soon",
            f"Your {name} will be available in {max(minutes_until_start, 0)} minutes",
        )
    if kind == ReminderKind.AVAILABLE_NOW:
        return (
            f"{_capitalize(name)} is now available",
            f"Your {name} is now available! You can take it now.",
        )
    if kind == ReminderKind.REMINDER_DUE:
        return (
            f"Reminder: {name} not taken yet",
            f"Your {name} has been available for {minutes_elapsed} minutes. "
            f"Remember to take it before {format_clock(window_end_minutes)}.",
        )
    if kind == ReminderKind.ENDING_SOON:
        return (
            f"{_capitalize(name)} ending soon",
            f"Your {name} will end in {max(minutes_until_end, 0)} minutes",
        )
    return (
        f"You have not taken your {name} yet!",
        f"Your {name} was available but you haven't taken it yet. Please take your break soon.",
    )
