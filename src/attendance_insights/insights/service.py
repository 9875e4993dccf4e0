from __future__ import annotations

import logging
import math
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from numbers import Real
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.cancellation import CancellationToken
from ..common.datetime_utils import DateLike, Weekday, iter_dates, parse_optional_date, today_local
from ..core.constants import DEFAULT_INSIGHTS_WORKERS, DEFAULT_MIN_REQUIRED_PERCENT
from ..core.enums import AttendanceStatus
from ..core.exceptions import Cancelled, InvalidRange, ValidationError
from ..schedules.resolver import ScheduleResolver, resolve_slot
from ..timetables.model import WeeklyTimetable
from ..timetables.repository import TimetableRepository
from .calculator.base import AttendanceCalculator
from .calculator.standard_calculator import StandardAttendanceCalculator
from .model import InsightsReport, SubjectStat

logger = logging.getLogger(__name__)


class InsightsService:
    def __init__(
        self,
        timetables: TimetableRepository,
        attendance: AttendanceRepository,
        resolver: ScheduleResolver,
        *,
        calculator: Optional[AttendanceCalculator] = None,
        workers: int = DEFAULT_INSIGHTS_WORKERS,
    ):
        self._timetables = timetables
        self._attendance = attendance
        self._resolver = resolver
        self._calculator = calculator or StandardAttendanceCalculator()
        self._workers = max(1, int(workers))

    def compute_insights(
        self,
        uid: str,
        semester_id: str,
        min_required_percent: Real = DEFAULT_MIN_REQUIRED_PERCENT,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
        workers: Optional[int] = None,
    ) -> InsightsReport:
        if not math.isfinite(float(min_required_percent)):
            raise ValidationError(f"minRequiredPercent must be a finite number (got {min_required_percent!r})")

        timetable = self._timetables.get_weekly_timetable(uid, semester_id)
        if timetable is None:
            return InsightsReport(min_required_percent=float(min_required_percent))

        range_start, range_end = self._resolve_range(timetable, start, end)
        dates = [d for d in iter_dates(range_start, range_end) if self._is_class_day(timetable, d)]

        held = self._count_held(uid, timetable, dates, cancel_token, workers or self._workers)

        present: Counter[str] = Counter()
        for log in self._attendance.list_attendance(uid, range_start, range_end):
            if log.status == AttendanceStatus.PRESENT:
                present[log.subject_id] += 1

        report = self._build_report(held, present, min_required_percent, range_start, range_end)
        logger.debug(
            "insights uid=%s sem=%s %s..%s held=%d present=%d",
            uid,
            semester_id,
            range_start,
            range_end,
            report.total_held,
            report.total_present,
        )
        return report

    @staticmethod
    def _resolve_range(
        timetable: WeeklyTimetable,
        start: Optional[DateLike],
        end: Optional[DateLike],
    ) -> tuple[date, date]:
        # Explicit bounds win over the timetable's own; each missing bound defaults to today.
        range_start = parse_optional_date(start) or timetable.start_date or today_local()
        range_end = parse_optional_date(end) or timetable.end_date or today_local()
        if range_start > range_end:
            raise InvalidRange(f"Start {range_start} is after end {range_end}")
        return range_start, range_end

    @staticmethod
    def _is_class_day(timetable: WeeklyTimetable, on: date) -> bool:
        weekday = Weekday.of(on)
        if weekday is Weekday.SUN:
            return False
        day = timetable.day(weekday)
        return day is not None and day.enabled

    def _count_held(
        self,
        uid: str,
        timetable: WeeklyTimetable,
        dates: Sequence[date],
        cancel_token: Optional[CancellationToken],
        workers: int,
    ) -> Counter[str]:
        if workers <= 1 or len(dates) <= 1:
            return self._count_chunk(uid, timetable, dates, cancel_token, None)

        # Each worker counts into its own Counter; merged once all succeed.
        chunks = [dates[i::workers] for i in range(workers) if dates[i::workers]]
        abort = threading.Event()
        total: Counter[str] = Counter()
        with ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="insights") as pool:
            futures = [pool.submit(self._count_chunk, uid, timetable, chunk, cancel_token, abort) for chunk in chunks]
            try:
                for future in futures:
                    total.update(future.result())
            except BaseException:
                abort.set()
                raise
        return total

    def _count_chunk(
        self,
        uid: str,
        timetable: WeeklyTimetable,
        dates: Sequence[date],
        cancel_token: Optional[CancellationToken],
        abort: Optional[threading.Event],
    ) -> Counter[str]:
        held: Counter[str] = Counter()
        for on in dates:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            if abort is not None and abort.is_set():
                raise Cancelled("Aggregation aborted")

            day = timetable.day(Weekday.of(on))
            overrides = self._resolver.load_day(uid, on)
            for p in range(timetable.periods_for(day)):
                slot = resolve_slot(on=on, period_index=p, timetable=timetable, overrides=overrides)
                if slot.is_scheduled:
                    held[slot.subject_id] += 1
        return held

    def _build_report(
        self,
        held: Counter[str],
        present: Counter[str],
        min_required_percent: Real,
        start: date,
        end: date,
    ) -> InsightsReport:
        by_subject: list[SubjectStat] = []
        total_held = 0
        total_present = 0

        for subject_id in sorted(held):
            n_held = held[subject_id]
            if n_held <= 0:
                continue
            n_present = present.get(subject_id, 0)
            percent = self._calculator.percent(n_present, n_held)
            by_subject.append(
                SubjectStat(
                    subject_id=subject_id,
                    held=n_held,
                    present=n_present,
                    percent=percent,
                    safe_bunks_left=self._calculator.safe_bunks_left(n_present, n_held, min_required_percent),
                    below_threshold=percent < float(min_required_percent),
                )
            )
            total_held += n_held
            total_present += n_present

        return InsightsReport(
            by_subject=by_subject,
            overall_percent=self._calculator.percent(total_present, total_held),
            total_held=total_held,
            total_present=total_present,
            min_required_percent=float(min_required_percent),
            start=start,
            end=end,
        )
