from __future__ import annotations

from datetime import date, timedelta

import pytest

from attendance_insights.common.cancellation import CancellationToken
from attendance_insights.core.enums import AttendanceStatus
from attendance_insights.core.exceptions import Cancelled, InvalidRange, StorageError, ValidationError
from attendance_insights.database.memory_store import InMemoryAttendance, InMemoryClassChanges, InMemoryTimetables
from attendance_insights.insights.service import InsightsService
from attendance_insights.overrides.model import ClassChange, Holiday, PeriodOverride
from attendance_insights.schedules.resolver import ScheduleResolver
from attendance_insights.timetables.model import WeeklyTimetable

from conftest import MONDAY, day, weekday_timetable

FOUR_WEEKS_END = date(2024, 1, 28)


def _weekdays(start: date, end: date):
    d = start
    while d <= end:
        if d.weekday() < 5:
            yield d
        d += timedelta(days=1)


def _mark(container, uid, on, period, subject, status=AttendanceStatus.PRESENT):
    container.attendance_repo.mark_attendance(
        uid=uid, on=on, period_index=period, subject_id=subject, status=status, marked_at=0
    )


def test_scenario_math_four_weeks(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH101"))
    for on in list(_weekdays(MONDAY, FOUR_WEEKS_END))[:15]:
        _mark(container, "u1", on, 0, "MATH101")

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END)

    assert len(report.by_subject) == 1
    stat = report.by_subject[0]
    assert (stat.subject_id, stat.held, stat.present) == ("MATH101", 20, 15)
    assert stat.percent == 75.0
    assert stat.safe_bunks_left == 0
    assert stat.absent == 5
    assert not stat.below_threshold
    assert report.total_held == 20
    assert report.total_present == 15
    assert report.overall_percent == 75.0


def test_holiday_removes_that_day_from_held(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH101", "PHY"))
    baseline = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END)

    container.holidays_repo.set_holiday(Holiday(date=date(2024, 1, 8), is_holiday=True, reason="Festival"))
    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END)

    before = {s.subject_id: s.held for s in baseline.by_subject}
    after = {s.subject_id: s.held for s in report.by_subject}
    assert before == {"MATH101": 20, "PHY": 20}
    assert after == {"MATH101": 19, "PHY": 19}


def test_overrides_shift_held_counts(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH", "PHY"))
    container.class_changes_repo.set_class_change(
        ClassChange(date=MONDAY, overrides=(PeriodOverride(period_index=1, cancelled=True),))
    )
    container.class_changes_repo.set_user_class_change(
        "u1", ClassChange(date=MONDAY, overrides=(PeriodOverride(period_index=0, subject_id="BIO"),))
    )

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, MONDAY)

    assert [(s.subject_id, s.held) for s in report.by_subject] == [("BIO", 1)]


def test_sundays_and_disabled_days_hold_nothing(container):
    timetable = WeeklyTimetable(semester_id="S1", periods_per_day=1, mon=day("MATH"), sat=day("MATH", enabled=False))
    container.timetables_repo.upsert_weekly_timetable("u1", timetable)

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, date(2024, 1, 7))

    assert report.total_held == 1


def test_no_timetable_gives_empty_report(container):
    _mark(container, "u1", MONDAY, 0, "MATH")

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END)

    assert report.by_subject == []
    assert report.total_held == 0
    assert report.total_present == 0
    assert report.overall_percent == 0.0
    assert not report.has_data


@pytest.mark.parametrize("req", [float("nan"), float("inf"), float("-inf")])
@pytest.mark.parametrize("with_timetable", [True, False])
def test_non_finite_threshold_is_rejected(container, req, with_timetable):
    if with_timetable:
        container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))

    with pytest.raises(ValidationError):
        container.insights_service.compute_insights("u1", "S1", req, MONDAY, FOUR_WEEKS_END)


def test_absent_marks_do_not_count_as_present(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))
    _mark(container, "u1", MONDAY, 0, "MATH", AttendanceStatus.ABSENT)
    _mark(container, "u1", date(2024, 1, 2), 0, "MATH")

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, date(2024, 1, 5))

    stat = report.by_subject[0]
    assert (stat.held, stat.present) == (5, 1)
    assert stat.percent == 20.0
    assert stat.below_threshold
    assert report.below_threshold


def test_marks_outside_range_are_ignored(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))
    _mark(container, "u1", date(2023, 12, 29), 0, "MATH")

    report = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, MONDAY)

    assert report.total_present == 0


def test_range_defaults_to_timetable_dates(container):
    timetable = weekday_timetable("MATH", start_date=MONDAY, end_date=date(2024, 1, 12))
    container.timetables_repo.upsert_weekly_timetable("u1", timetable)

    report = container.insights_service.compute_insights("u1", "S1")

    assert report.total_held == 10
    assert (report.start, report.end) == (MONDAY, date(2024, 1, 12))


def test_missing_end_defaults_to_today(container, monkeypatch):
    monkeypatch.setattr("attendance_insights.insights.service.today_local", lambda: date(2024, 1, 3))
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH", start_date=MONDAY))

    report = container.insights_service.compute_insights("u1", "S1")

    assert report.total_held == 3
    assert report.end == date(2024, 1, 3)


def test_explicit_bounds_override_timetable_dates(container):
    timetable = weekday_timetable("MATH", start_date=MONDAY, end_date=date(2024, 6, 30))
    container.timetables_repo.upsert_weekly_timetable("u1", timetable)

    report = container.insights_service.compute_insights("u1", "S1", 75, "2024-01-08", "2024-01-09")

    assert report.total_held == 2


def test_inverted_range_is_rejected(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))

    with pytest.raises(InvalidRange):
        container.insights_service.compute_insights("u1", "S1", 75, "2024-02-01", "2024-01-01")


def test_parallel_matches_serial(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH", "PHY", None, "CHEM"))
    container.holidays_repo.set_holiday(Holiday(date=date(2024, 1, 10), is_holiday=True))
    container.holidays_repo.set_holiday(Holiday(date=date(2024, 1, 17), early_close_after_period=1))
    container.class_changes_repo.set_class_change(
        ClassChange(date=date(2024, 1, 22), overrides=(PeriodOverride(period_index=2, subject_id="LAB"),))
    )
    for i, on in enumerate(_weekdays(MONDAY, FOUR_WEEKS_END)):
        if i % 3:
            _mark(container, "u1", on, 0, "MATH")

    serial = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END, workers=1)
    parallel = container.insights_service.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END, workers=4)

    assert parallel == serial
    assert serial.total_held > 0


@pytest.mark.parametrize("workers", [1, 3])
def test_cancelled_token_aborts(container, workers):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))
    token = CancellationToken()
    token.cancel()

    with pytest.raises(Cancelled):
        container.insights_service.compute_insights(
            "u1", "S1", 75, MONDAY, FOUR_WEEKS_END, cancel_token=token, workers=workers
        )


def test_expired_deadline_aborts(container):
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH"))

    with pytest.raises(Cancelled):
        container.insights_service.compute_insights(
            "u1", "S1", 75, MONDAY, FOUR_WEEKS_END, cancel_token=CancellationToken.with_timeout(0)
        )


class _BrokenHolidays:
    def get_holiday(self, on):
        raise StorageError("holidays table unavailable")

    def set_holiday(self, holiday):
        raise StorageError("holidays table unavailable")

    def list_holidays(self, start=None, end=None):
        raise StorageError("holidays table unavailable")


@pytest.mark.parametrize("workers", [1, 2])
def test_storage_errors_propagate(workers):
    timetables = InMemoryTimetables()
    timetables.upsert_weekly_timetable("u1", weekday_timetable("MATH"))
    attendance = InMemoryAttendance()
    resolver = ScheduleResolver(timetables, _BrokenHolidays(), InMemoryClassChanges())
    svc = InsightsService(timetables, attendance, resolver, workers=workers)

    with pytest.raises(StorageError):
        svc.compute_insights("u1", "S1", 75, MONDAY, FOUR_WEEKS_END)
