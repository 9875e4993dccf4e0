from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_INSIGHTS_WORKERS, DEFAULT_MIN_REQUIRED_PERCENT
from .database.connection import DBConfig, DatabaseConnection
from .database.memory_store import (
    InMemoryAttendance,
    InMemoryClassChanges,
    InMemoryHolidays,
    InMemorySubjects,
    InMemoryTemplates,
    InMemoryTimetables,
)
from .insights.service import InsightsService
from .overrides.mysql_override_repository import MySQLClassChangeRepository, MySQLHolidayRepository
from .overrides.repository import ClassChangeRepository, HolidayRepository
from .overrides.service import OverrideService
from .schedules.resolver import ScheduleResolver
from .templates.mysql_template_repository import MySQLTemplateRepository
from .templates.repository import TemplateRepository
from .templates.service import TemplateService
from .timetables.mysql_timetable_repository import MySQLSubjectRepository, MySQLTimetableRepository
from .timetables.repository import SubjectRepository, TimetableRepository
from .timetables.service import TimetableService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    timetables_repo: TimetableRepository
    subjects_repo: SubjectRepository
    holidays_repo: HolidayRepository
    class_changes_repo: ClassChangeRepository
    attendance_repo: AttendanceRepository
    templates_repo: TemplateRepository

    resolver: ScheduleResolver
    timetable_service: TimetableService
    override_service: OverrideService
    attendance_service: AttendanceService
    template_service: TemplateService
    insights_service: InsightsService

    min_required_percent: float = DEFAULT_MIN_REQUIRED_PERCENT


def _wire(
    *,
    conn: Optional[DatabaseConnection],
    timetables_repo: TimetableRepository,
    subjects_repo: SubjectRepository,
    holidays_repo: HolidayRepository,
    class_changes_repo: ClassChangeRepository,
    attendance_repo: AttendanceRepository,
    templates_repo: TemplateRepository,
    min_required_percent: float,
    insights_workers: int,
) -> Container:
    resolver = ScheduleResolver(timetables_repo, holidays_repo, class_changes_repo)
    timetable_service = TimetableService(timetables_repo, subjects_repo)

    return Container(
        conn=conn,
        timetables_repo=timetables_repo,
        subjects_repo=subjects_repo,
        holidays_repo=holidays_repo,
        class_changes_repo=class_changes_repo,
        attendance_repo=attendance_repo,
        templates_repo=templates_repo,
        resolver=resolver,
        timetable_service=timetable_service,
        override_service=OverrideService(holidays_repo, class_changes_repo),
        attendance_service=AttendanceService(attendance_repo, timetables_repo, resolver),
        template_service=TemplateService(templates_repo, timetable_service),
        insights_service=InsightsService(timetables_repo, attendance_repo, resolver, workers=insights_workers),
        min_required_percent=float(min_required_percent),
    )


def build_container(
    *,
    db_config: dict,
    min_required_percent: float = DEFAULT_MIN_REQUIRED_PERCENT,
    insights_workers: int = DEFAULT_INSIGHTS_WORKERS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return _wire(
        conn=conn,
        timetables_repo=MySQLTimetableRepository(conn),
        subjects_repo=MySQLSubjectRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        class_changes_repo=MySQLClassChangeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        templates_repo=MySQLTemplateRepository(conn),
        min_required_percent=min_required_percent,
        insights_workers=insights_workers,
    )


def build_memory_container(
    *,
    min_required_percent: float = DEFAULT_MIN_REQUIRED_PERCENT,
    insights_workers: int = DEFAULT_INSIGHTS_WORKERS,
) -> Container:
    return _wire(
        conn=None,
        timetables_repo=InMemoryTimetables(),
        subjects_repo=InMemorySubjects(),
        holidays_repo=InMemoryHolidays(),
        class_changes_repo=InMemoryClassChanges(),
        attendance_repo=InMemoryAttendance(),
        templates_repo=InMemoryTemplates(),
        min_required_percent=min_required_percent,
        insights_workers=insights_workers,
    )
