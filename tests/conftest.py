from __future__ import annotations

from datetime import date
from typing import Optional

import pytest

from attendance_insights.container import build_memory_container
from attendance_insights.timetables.model import DayTimetable, PeriodDef, WeeklyTimetable

# 2024-01-01 is a Monday.
MONDAY = date(2024, 1, 1)
WEDNESDAY = date(2024, 1, 3)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def day(*subjects: Optional[str], enabled: bool = True) -> DayTimetable:
    """Day whose period ``i`` teaches ``subjects[i]``; ``None`` leaves the period free."""
    return DayTimetable(
        enabled=enabled,
        periods=tuple(PeriodDef(index=i, subject_id=s) for i, s in enumerate(subjects) if s),
    )


def weekday_timetable(*subjects: Optional[str], semester_id: str = "S1", periods_per_day: int = 6, **extra) -> WeeklyTimetable:
    """Same day on Monday-Friday, no Saturday."""
    d = day(*subjects)
    return WeeklyTimetable(
        semester_id=semester_id,
        periods_per_day=periods_per_day,
        mon=d,
        tue=d,
        wed=d,
        thu=d,
        fri=d,
        **extra,
    )


@pytest.fixture
def container():
    return build_memory_container()


@pytest.fixture
def app(container, monkeypatch):
    from attendance_insights.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


STUDENT = {"X-User-Id": "u1"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
