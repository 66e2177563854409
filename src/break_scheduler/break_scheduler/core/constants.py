"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 1440

# Break offsets from shift start, in minutes: (start, end)
FIRST_BREAK_OFFSETS = (120, 180)
MEAL_BREAK_OFFSETS = (240, 420)
SECOND_BREAK_OFFSETS = (465, 525)

AVAILABLE_SOON_LEAD_MINUTES = 15
ENDING_SOON_LEAD_MINUTES = 15
REMINDER_INTERVAL_MINUTES = 30
REMINDER_TOLERANCE_MINUTES = 5
MISSED_INTERVAL_MINUTES = 30
REPEAT_MIN_GAP_MINUTES = 25

NOTIFICATION_CATEGORY = "break"

DEFAULT_TIME_ZONE = "Asia/Manila"
DEFAULT_TICK_SECONDS = 60
DEFAULT_WORKERS = 4
DEFAULT_TICK_TIMEOUT_SECONDS = 30
DEFAULT_STORE_TIMEOUT_SECONDS = 5
