"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MIN_REQUIRED_PERCENT = 75
DEFAULT_PERIODS_PER_DAY = 6
DEFAULT_INSIGHTS_WORKERS = 1

ISO_DATE_FORMAT = "%Y-%m-%d"

# Weekday keys stored on a WeeklyTimetable; Sunday never has an entry.
DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat")
REQUIRED_DAY_KEYS = ("mon", "tue", "wed", "thu", "fri")
