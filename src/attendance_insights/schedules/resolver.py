"""Effective-schedule resolution.

Layers, first match wins:

1. Sunday: never a class day.
2. Holiday record: full holiday, or an early close after period ``k``.
3. Per-user class change entry for the period.
4. Global class change entry (only when the user record has no entry for the period).
5. Weekly timetable: disabled/missing day cancels; missing period is free.
6. No timetable: free.

``resolve_slot`` is a pure function over already-loaded records; the
``ScheduleResolver`` only adds the store reads around it.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import DateLike, Weekday, parse_iso_date
from ..common.validators import require_period_index
from ..core.enums import SlotSource
from ..overrides.repository import ClassChangeRepository, HolidayRepository
from ..timetables.model import WeeklyTimetable
from ..timetables.repository import TimetableRepository
from .model import DayOverrides, SlotResolution

logger = logging.getLogger(__name__)


def resolve_slot(
    *,
    on: date,
    period_index: int,
    timetable: Optional[WeeklyTimetable],
    overrides: DayOverrides,
) -> SlotResolution:
    weekday = Weekday.of(on)
    if weekday is Weekday.SUN:
        return SlotResolution.cancelled_by(period_index, SlotSource.SUNDAY)

    holiday = overrides.holiday
    if holiday is not None and holiday.cancels(period_index):
        source = SlotSource.HOLIDAY if holiday.is_holiday else SlotSource.EARLY_CLOSE
        return SlotResolution.cancelled_by(period_index, source)

    override, source = None, SlotSource.USER_OVERRIDE
    if overrides.user_change is not None:
        override = overrides.user_change.override_for(period_index)
    if override is None and overrides.global_change is not None:
        override, source = overrides.global_change.override_for(period_index), SlotSource.GLOBAL_OVERRIDE

    if override is not None:
        if override.cancelled:
            return SlotResolution.cancelled_by(period_index, source)
        if override.subject_id:
            return SlotResolution.scheduled(period_index, override.subject_id, source)
        # An entry with neither field defers to the timetable.

    if timetable is None:
        return SlotResolution.free(period_index, SlotSource.NO_TIMETABLE)

    day = timetable.day(weekday)
    if day is None or not day.enabled:
        return SlotResolution.cancelled_by(period_index, SlotSource.DAY_DISABLED)

    period = day.period_at(period_index)
    if period is None or not period.subject_id:
        return SlotResolution.free(period_index, SlotSource.TIMETABLE)
    return SlotResolution.scheduled(period_index, period.subject_id, SlotSource.TIMETABLE)


class ScheduleResolver:
    def __init__(
        self,
        timetables: TimetableRepository,
        holidays: HolidayRepository,
        class_changes: ClassChangeRepository,
    ):
        self._timetables = timetables
        self._holidays = holidays
        self._class_changes = class_changes

    def load_day(self, uid: str, on: date) -> DayOverrides:
        """Fetch every date-scoped record that can affect ``uid`` on ``on``."""
        return DayOverrides(
            holiday=self._holidays.get_holiday(on),
            user_change=self._class_changes.get_user_class_change(uid, on),
            global_change=self._class_changes.get_class_change(on),
        )

    def resolve(self, uid: str, semester_id: str, on: DateLike, period_index: int) -> SlotResolution:
        day = parse_iso_date(on)
        index = require_period_index(period_index)

        if Weekday.of(day) is Weekday.SUN:
            return SlotResolution.cancelled_by(index, SlotSource.SUNDAY)

        result = resolve_slot(
            on=day,
            period_index=index,
            timetable=self._timetables.get_weekly_timetable(uid, semester_id),
            overrides=self.load_day(uid, day),
        )
        logger.debug("resolve uid=%s sem=%s %s p%d -> %s", uid, semester_id, day, index, result.kind.value)
        return result

    def resolve_day(self, uid: str, semester_id: str, on: DateLike) -> list[SlotResolution]:
        """Resolve every period of one date.

        The period count comes from the timetable (or the day's own periods);
        without a timetable, only periods named by an override are reported.
        """
        day = parse_iso_date(on)
        timetable = self._timetables.get_weekly_timetable(uid, semester_id)
        overrides = self.load_day(uid, day)

        count = 0
        if timetable is not None:
            weekday_tt = timetable.day(Weekday.of(day))
            count = timetable.periods_for(weekday_tt) if weekday_tt is not None else timetable.periods_per_day
        for change in (overrides.user_change, overrides.global_change):
            if change is not None and change.overrides:
                count = max(count, max(o.period_index for o in change.overrides) + 1)

        return [
            resolve_slot(on=day, period_index=p, timetable=timetable, overrides=overrides)
            for p in range(count)
        ]
