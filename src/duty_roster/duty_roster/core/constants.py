"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

FATIGUE_WINDOW_DAYS = 1
DEFAULT_LOCK_TIMEOUT_SECONDS = 10
DEFAULT_ISOLATION_LEVEL = "READ COMMITTED"
DEFAULT_LIST_LIMIT = 200
LOCK_NAME_PREFIX = "duty_roster:day:"

# Mon=0 ... Sun=6; Friday through Sunday follow the weekend routine.
WEEKEND_ROUTINE_WEEKDAYS = frozenset({4, 5, 6})

WEEKDAY_LABELS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
