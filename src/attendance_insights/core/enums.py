from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for permission checks on global records."""

    ADMIN = "admin"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Mark stored for one period of one day."""

    PRESENT = "present"
    ABSENT = "absent"


class SlotKind(str, Enum):
    """Outcome of resolving a (date, period) slot."""

    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    FREE = "free"


class SlotSource(str, Enum):
    """Which layer decided a slot's outcome."""

    HOLIDAY = "holiday"
    EARLY_CLOSE = "early_close"
    USER_OVERRIDE = "user_override"
    GLOBAL_OVERRIDE = "global_override"
    SUNDAY = "sunday"
    DAY_DISABLED = "day_disabled"
    TIMETABLE = "timetable"
    NO_TIMETABLE = "no_timetable"
