"""In-memory document store.

Implements every repository Protocol on plain dicts keyed the same way as the
MySQL tables. Used for local development (``STORAGE_BACKEND=memory``) and tests.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceLog
from ..core.enums import AttendanceStatus
from ..overrides.model import ClassChange, Holiday
from ..overrides.repository import user_class_change_doc_id
from ..templates.model import TimetableTemplate
from ..timetables.model import Subject, WeeklyTimetable
from ..timetables.repository import timetable_doc_id


def _in_range(on: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and on < start:
        return False
    if end is not None and on > end:
        return False
    return True


class InMemoryTimetables:
    def __init__(self):
        self._docs: dict[str, WeeklyTimetable] = {}
        self._lock = threading.Lock()

    def get_weekly_timetable(self, uid: str, semester_id: str) -> Optional[WeeklyTimetable]:
        return self._docs.get(timetable_doc_id(uid, semester_id))

    def upsert_weekly_timetable(self, uid: str, timetable: WeeklyTimetable) -> str:
        doc_id = timetable_doc_id(uid, timetable.semester_id)
        with self._lock:
            self._docs[doc_id] = timetable
        return doc_id

    def delete_weekly_timetable(self, uid: str, semester_id: str) -> bool:
        with self._lock:
            return self._docs.pop(timetable_doc_id(uid, semester_id), None) is not None


class InMemorySubjects:
    def __init__(self):
        self._docs: dict[str, tuple[Subject, ...]] = {}

    def get_subjects(self, uid: str, semester_id: str) -> Sequence[Subject]:
        return list(self._docs.get(timetable_doc_id(uid, semester_id), ()))

    def save_subjects(self, uid: str, semester_id: str, subjects: Sequence[Subject]) -> None:
        self._docs[timetable_doc_id(uid, semester_id)] = tuple(subjects)


class InMemoryHolidays:
    def __init__(self):
        self._by_date: dict[date, Holiday] = {}
        self._lock = threading.Lock()

    def get_holiday(self, on: date) -> Optional[Holiday]:
        return self._by_date.get(on)

    def set_holiday(self, holiday: Holiday) -> Holiday:
        with self._lock:
            stored = holiday.merged_over(self._by_date.get(holiday.date))
            self._by_date[holiday.date] = stored
        return stored

    def list_holidays(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        items = [h for d, h in self._by_date.items() if _in_range(d, start, end)]
        items.sort(key=lambda h: h.date)
        return items


class InMemoryClassChanges:
    def __init__(self):
        self._global: dict[date, ClassChange] = {}
        self._per_user: dict[str, ClassChange] = {}

    def get_class_change(self, on: date) -> Optional[ClassChange]:
        return self._global.get(on)

    def set_class_change(self, change: ClassChange) -> None:
        self._global[change.date] = change

    def list_class_changes(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[ClassChange]:
        items = [c for d, c in self._global.items() if _in_range(d, start, end)]
        items.sort(key=lambda c: c.date)
        return items

    def get_user_class_change(self, uid: str, on: date) -> Optional[ClassChange]:
        return self._per_user.get(user_class_change_doc_id(uid, on))

    def set_user_class_change(self, uid: str, change: ClassChange) -> None:
        self._per_user[user_class_change_doc_id(uid, change.date)] = change


class InMemoryAttendance:
    def __init__(self):
        self._by_slot: dict[tuple[str, date, int], AttendanceLog] = {}
        self._lock = threading.Lock()

    def mark_attendance(
        self,
        *,
        uid: str,
        on: date,
        period_index: int,
        subject_id: str,
        status: AttendanceStatus,
        marked_at: int,
    ) -> AttendanceLog:
        log = AttendanceLog(
            uid=uid,
            date=on,
            period_index=int(period_index),
            subject_id=subject_id,
            status=status,
            marked_at=int(marked_at),
        )
        with self._lock:
            self._by_slot[log.slot_key] = log
        return log

    def list_attendance(self, uid: str, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceLog]:
        items = [log for log in self._by_slot.values() if log.uid == uid and _in_range(log.date, start, end)]
        items.sort(key=lambda log: (-log.date.toordinal(), log.period_index))
        return items


class InMemoryTemplates:
    def __init__(self):
        self._by_id: dict[str, TimetableTemplate] = {}

    def upsert_template(self, template: TimetableTemplate) -> None:
        self._by_id[template.id] = template

    def get_template(self, template_id: str) -> Optional[TimetableTemplate]:
        return self._by_id.get(template_id)

    def list_templates(self) -> Sequence[TimetableTemplate]:
        return [self._by_id[k] for k in sorted(self._by_id)]

    def delete_template(self, template_id: str) -> bool:
        return self._by_id.pop(template_id, None) is not None
