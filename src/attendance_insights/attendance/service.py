from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from ..common.datetime_utils import (
    DateLike,
    Weekday,
    epoch_millis,
    iter_dates,
    now_local,
    parse_iso_date,
    parse_optional_date,
)
from ..common.validators import require_non_empty, require_period_index
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidRange, NotFoundError, ValidationError
from ..schedules.resolver import ScheduleResolver, resolve_slot
from ..timetables.repository import TimetableRepository
from .model import AttendanceLog, BulkMarkResult, SkippedSlot
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_status(value: Union[str, AttendanceStatus]) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status {value!r} (expected present or absent)")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        timetables: TimetableRepository,
        resolver: ScheduleResolver,
    ):
        self._attendance = attendance
        self._timetables = timetables
        self._resolver = resolver

    def mark(
        self,
        uid: str,
        semester_id: str,
        on: DateLike,
        period_index: int,
        status: Union[str, AttendanceStatus],
        subject_id: Optional[str] = None,
    ) -> AttendanceLog:
        """Record one mark; re-marking the same slot overwrites it.

        Without ``subject_id`` the effective subject of the slot is used, and a
        slot with no scheduled class cannot be marked.
        """
        uid = require_non_empty(uid, "uid")
        day = parse_iso_date(on)
        index = require_period_index(period_index)
        status = parse_status(status)

        if not subject_id:
            slot = self._resolver.resolve(uid, semester_id, day, index)
            if not slot.is_scheduled:
                raise ValidationError(f"No class scheduled on {day} period {index} ({slot.source.value})")
            subject_id = slot.subject_id

        log = self._attendance.mark_attendance(
            uid=uid,
            on=day,
            period_index=index,
            subject_id=str(subject_id),
            status=status,
            marked_at=epoch_millis(now_local()),
        )
        logger.info("Marked %s uid=%s %s p%d subject=%s", status.value, uid, day, index, subject_id)
        return log

    def mark_absent_range(
        self,
        uid: str,
        semester_id: str,
        start: DateLike,
        end: DateLike,
        periods: Optional[Iterable[int]] = None,
    ) -> BulkMarkResult:
        """Mark every scheduled slot in [start, end] absent.

        ``periods`` narrows the periods considered on each date; by default all
        periods of the day are walked. Sundays are never walked.
        """
        uid = require_non_empty(uid, "uid")
        range_start, range_end = parse_iso_date(start), parse_iso_date(end)
        if range_start > range_end:
            raise InvalidRange(f"Start {range_start} is after end {range_end}")
        selected = None if periods is None else sorted({require_period_index(p) for p in periods})

        timetable = self._timetables.get_weekly_timetable(uid, semester_id)
        if timetable is None:
            raise NotFoundError(f"No timetable for semester {semester_id}")

        result = BulkMarkResult()
        marked_at = epoch_millis(now_local())
        for on in iter_dates(range_start, range_end):
            weekday = Weekday.of(on)
            if weekday is Weekday.SUN:
                continue
            if selected is None:
                day = timetable.day(weekday)
                indexes = range(timetable.periods_for(day) if day is not None else timetable.periods_per_day)
            else:
                indexes = selected

            overrides = self._resolver.load_day(uid, on)
            for p in indexes:
                slot = resolve_slot(on=on, period_index=p, timetable=timetable, overrides=overrides)
                if not slot.is_scheduled:
                    result.skipped.append(SkippedSlot(date=on, period_index=p, reason=slot.source.value))
                    continue
                result.marked.append(
                    self._attendance.mark_attendance(
                        uid=uid,
                        on=on,
                        period_index=p,
                        subject_id=str(slot.subject_id),
                        status=AttendanceStatus.ABSENT,
                        marked_at=marked_at,
                    )
                )

        logger.info(
            "Bulk absence uid=%s %s..%s marked=%d skipped=%d",
            uid,
            range_start,
            range_end,
            len(result.marked),
            len(result.skipped),
        )
        return result

    def list_records(
        self,
        uid: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> list[AttendanceLog]:
        uid = require_non_empty(uid, "uid")
        lo, hi = parse_optional_date(start), parse_optional_date(end)
        if lo is not None and hi is not None and lo > hi:
            raise InvalidRange(f"Start {lo} is after end {hi}")
        return list(self._attendance.list_attendance(uid, lo, hi))
