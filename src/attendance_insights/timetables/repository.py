from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Subject, WeeklyTimetable


def timetable_doc_id(uid: str, semester_id: str) -> str:
    return f"{uid}_{semester_id}"


class TimetableRepository(Protocol):
    """Weekly timetables keyed by ``{uid}_{semesterId}``.

    Note (DIP): resolver and services depend on this interface, never on a concrete store.
    """

    def get_weekly_timetable(self, uid: str, semester_id: str) -> Optional[WeeklyTimetable]:
        raise NotImplementedError

    def upsert_weekly_timetable(self, uid: str, timetable: WeeklyTimetable) -> str:
        """Create or replace the timetable; returns its document id."""

        raise NotImplementedError

    def delete_weekly_timetable(self, uid: str, semester_id: str) -> bool:
        raise NotImplementedError


class SubjectRepository(Protocol):
    def get_subjects(self, uid: str, semester_id: str) -> Sequence[Subject]:
        raise NotImplementedError

    def save_subjects(self, uid: str, semester_id: str, subjects: Sequence[Subject]) -> None:
        raise NotImplementedError
