"""Example: drive the services directly (no Flask).

Controllers are thin; resolution and insights live in the service layer.
"""

from datetime import date

from attendance_insights.container import build_memory_container
from attendance_insights.core.enums import Role
from attendance_insights.overrides.model import Holiday
from attendance_insights.timetables.model import DayTimetable, PeriodDef, WeeklyTimetable


def main():
    container = build_memory_container()

    monday = DayTimetable(periods=(PeriodDef(index=0, subject_id="MATH101"), PeriodDef(index=1, subject_id="PHY101")))
    timetable = WeeklyTimetable(semester_id="S1", periods_per_day=2, mon=monday, tue=monday, wed=monday, thu=monday, fri=monday)
    container.timetable_service.save("student-1", timetable)
    container.override_service.set_holiday(
        current_role=Role.ADMIN, holiday=Holiday(date=date(2024, 1, 8), is_holiday=True, reason="Festival")
    )

    for day in ("2024-01-01", "2024-01-02", "2024-01-03"):
        container.attendance_service.mark("student-1", "S1", day, 0, "present")

    report = container.insights_service.compute_insights("student-1", "S1", 75, "2024-01-01", "2024-01-12")
    print(report.to_document())


if __name__ == "__main__":
    main()
