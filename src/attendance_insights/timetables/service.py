from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_unique
from ..core.constants import REQUIRED_DAY_KEYS
from ..core.exceptions import NotFoundError, TimetableLockedError, ValidationError
from .model import Subject, WeeklyTimetable
from .repository import SubjectRepository, TimetableRepository

logger = logging.getLogger(__name__)


def validate_timetable(timetable: WeeklyTimetable) -> None:
    require_non_empty(timetable.semester_id, "semesterId")
    if timetable.periods_per_day < 0:
        raise ValidationError("periodsPerDay must be >= 0")
    if timetable.start_date and timetable.end_date and timetable.start_date > timetable.end_date:
        raise ValidationError("startDate must not be after endDate")

    for key, day in timetable.days().items():
        if day is None:
            continue
        indexes = [p.index for p in day.periods]
        require_unique(indexes, f"period index on {key}")
        for index in indexes:
            if index < 0:
                raise ValidationError(f"Period index on {key} must be >= 0 (got {index})")
            if timetable.periods_per_day and index >= timetable.periods_per_day:
                raise ValidationError(
                    f"Period index {index} on {key} is outside periodsPerDay={timetable.periods_per_day}"
                )


def _check_subjects(subjects: Sequence[Subject]) -> None:
    for s in subjects:
        require_non_empty(s.id, "subject id")
    ids = [s.id for s in subjects]
    if len(set(ids)) != len(ids):
        raise ValidationError("Duplicate subject id")


class TimetableService:
    def __init__(self, timetables: TimetableRepository, subjects: SubjectRepository):
        self._timetables = timetables
        self._subjects = subjects

    def get(self, uid: str, semester_id: str) -> Optional[WeeklyTimetable]:
        return self._timetables.get_weekly_timetable(uid, semester_id)

    def save(self, uid: str, timetable: WeeklyTimetable) -> str:
        uid = require_non_empty(uid, "uid")
        validate_timetable(timetable)

        existing = self._timetables.get_weekly_timetable(uid, timetable.semester_id)
        if existing is not None and existing.locked:
            raise TimetableLockedError(f"Timetable for semester {timetable.semester_id} is locked")

        doc_id = self._timetables.upsert_weekly_timetable(uid, timetable)
        logger.info("Saved timetable %s", doc_id)
        return doc_id

    def delete(self, uid: str, semester_id: str) -> None:
        existing = self._timetables.get_weekly_timetable(uid, semester_id)
        if existing is None:
            raise NotFoundError(f"No timetable for semester {semester_id}")
        if existing.locked:
            raise TimetableLockedError(f"Timetable for semester {semester_id} is locked")
        self._timetables.delete_weekly_timetable(uid, semester_id)
        logger.info("Deleted timetable uid=%s sem=%s", uid, semester_id)

    def setup_semester(
        self,
        uid: str,
        semester_id: str,
        subjects: Sequence[Subject],
        timetable: WeeklyTimetable,
    ) -> str:
        """First-time semester setup: subject catalog plus timetable."""
        semester_id = require_non_empty(semester_id, "semesterId")
        timetable = timetable.with_semester(semester_id)

        days = timetable.days()
        missing = [key for key in REQUIRED_DAY_KEYS if days.get(key) is None]
        if missing:
            raise ValidationError(f"Timetable is missing days: {', '.join(missing)}")

        # Catalog is written only after the timetable is accepted.
        _check_subjects(subjects)
        doc_id = self.save(uid, timetable)
        self.save_subjects(uid, semester_id, subjects)
        return doc_id

    def get_subjects(self, uid: str, semester_id: str) -> list[Subject]:
        return list(self._subjects.get_subjects(uid, semester_id))

    def save_subjects(self, uid: str, semester_id: str, subjects: Sequence[Subject]) -> None:
        uid = require_non_empty(uid, "uid")
        _check_subjects(subjects)
        self._subjects.save_subjects(uid, semester_id, subjects)
