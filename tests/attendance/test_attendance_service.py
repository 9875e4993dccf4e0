from __future__ import annotations

from datetime import date, datetime

import pytest

from attendance_insights.core.enums import AttendanceStatus
from attendance_insights.core.exceptions import InvalidPeriod, InvalidRange, NotFoundError, ValidationError
from attendance_insights.overrides.model import ClassChange, Holiday, PeriodOverride

from conftest import MONDAY, SUNDAY, weekday_timetable


@pytest.fixture
def seeded(container, monkeypatch):
    monkeypatch.setattr(
        "attendance_insights.attendance.service.now_local", lambda: datetime(2024, 1, 1, 9, 30)
    )
    container.timetables_repo.upsert_weekly_timetable("u1", weekday_timetable("MATH", "PHY", periods_per_day=3))
    return container


def test_mark_resolves_subject_when_omitted(seeded):
    log = seeded.attendance_service.mark("u1", "S1", "2024-01-01", 1, "present")

    assert log.subject_id == "PHY"
    assert log.status == AttendanceStatus.PRESENT
    assert log.marked_at == int(datetime(2024, 1, 1, 9, 30).timestamp() * 1000)


def test_mark_uses_override_subject(seeded):
    seeded.class_changes_repo.set_user_class_change(
        "u1", ClassChange(date=MONDAY, overrides=(PeriodOverride(period_index=0, subject_id="BIO"),))
    )

    assert seeded.attendance_service.mark("u1", "S1", MONDAY, 0, "absent").subject_id == "BIO"


def test_mark_refuses_unscheduled_slot(seeded):
    with pytest.raises(ValidationError):
        seeded.attendance_service.mark("u1", "S1", MONDAY, 2, "present")
    with pytest.raises(ValidationError):
        seeded.attendance_service.mark("u1", "S1", SUNDAY, 0, "present")


def test_mark_with_explicit_subject_skips_resolution(seeded):
    log = seeded.attendance_service.mark("u1", "S1", SUNDAY, 0, "present", subject_id="EXTRA")

    assert log.subject_id == "EXTRA"


def test_mark_is_idempotent_and_latest_wins(seeded):
    svc = seeded.attendance_service
    svc.mark("u1", "S1", MONDAY, 0, "present")
    svc.mark("u1", "S1", MONDAY, 0, "present")
    svc.mark("u1", "S1", MONDAY, 0, "absent")

    records = svc.list_records("u1")

    assert len(records) == 1
    assert records[0].status == AttendanceStatus.ABSENT


@pytest.mark.parametrize("status", ["late", "", "P"])
def test_mark_rejects_unknown_status(seeded, status):
    with pytest.raises(ValidationError):
        seeded.attendance_service.mark("u1", "S1", MONDAY, 0, status)


def test_mark_rejects_negative_period(seeded):
    with pytest.raises(InvalidPeriod):
        seeded.attendance_service.mark("u1", "S1", MONDAY, -1, "present")


def test_records_are_sorted_newest_date_first(seeded):
    svc = seeded.attendance_service
    svc.mark("u1", "S1", "2024-01-01", 1, "present")
    svc.mark("u1", "S1", "2024-01-02", 1, "present")
    svc.mark("u1", "S1", "2024-01-02", 0, "present")
    svc.mark("u2", "S1", "2024-01-02", 0, "present", subject_id="MATH")

    records = svc.list_records("u1")

    assert [(r.date.day, r.period_index) for r in records] == [(2, 0), (2, 1), (1, 1)]


def test_records_filter_by_range(seeded):
    svc = seeded.attendance_service
    for d in ("2024-01-01", "2024-01-02", "2024-01-03"):
        svc.mark("u1", "S1", d, 0, "present")

    assert len(svc.list_records("u1", start="2024-01-02")) == 2
    assert len(svc.list_records("u1", end="2024-01-02")) == 2
    assert len(svc.list_records("u1", "2024-01-02", "2024-01-02")) == 1
    with pytest.raises(InvalidRange):
        svc.list_records("u1", "2024-01-03", "2024-01-01")


def test_bulk_absence_marks_scheduled_slots_only(seeded):
    seeded.holidays_repo.set_holiday(Holiday(date=date(2024, 1, 2), is_holiday=True))

    result = seeded.attendance_service.mark_absent_range("u1", "S1", "2024-01-01", "2024-01-07")

    # Mon, Wed, Thu, Fri have MATH and PHY; Tue is a holiday; Sat has no day.
    assert len(result.marked) == 8
    assert all(log.status == AttendanceStatus.ABSENT for log in result.marked)
    reasons = {(s.date, s.period_index): s.reason for s in result.skipped}
    assert reasons[(date(2024, 1, 2), 0)] == "holiday"
    assert reasons[(date(2024, 1, 1), 2)] == "timetable"
    assert (date(2024, 1, 6), 0) in reasons
    assert all(s.date != SUNDAY for s in result.skipped)


def test_bulk_absence_with_selected_periods(seeded):
    result = seeded.attendance_service.mark_absent_range("u1", "S1", MONDAY, MONDAY, periods=[1, 1, 2])

    assert [(log.period_index, log.subject_id) for log in result.marked] == [(1, "PHY")]
    assert [s.period_index for s in result.skipped] == [2]


def test_bulk_absence_overwrites_present(seeded):
    svc = seeded.attendance_service
    svc.mark("u1", "S1", MONDAY, 0, "present")

    svc.mark_absent_range("u1", "S1", MONDAY, MONDAY, periods=[0])

    assert svc.list_records("u1")[0].status == AttendanceStatus.ABSENT


def test_bulk_absence_needs_timetable(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.mark_absent_range("ghost", "S1", MONDAY, MONDAY)


def test_bulk_absence_rejects_inverted_range(seeded):
    with pytest.raises(InvalidRange):
        seeded.attendance_service.mark_absent_range("u1", "S1", "2024-01-05", "2024-01-01")
