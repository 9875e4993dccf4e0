from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from ..timetables.model import Subject, WeeklyTimetable


@dataclass(frozen=True)
class ClassKey:
    branch: str
    division: str
    semester: str

    @property
    def template_id(self) -> str:
        """``{branch}_{division}_{semester}`` lower-cased, whitespace runs as ``-``."""

        def _part(s: str) -> str:
            return re.sub(r"\s+", "-", s.strip().lower())

        return f"{_part(self.branch)}_{_part(self.division)}_{_part(self.semester)}"


@dataclass(frozen=True)
class TimetableTemplate:
    """Admin-curated timetable and subject catalog for one class."""

    id: str
    branch: str
    division: str
    semester: str
    periods_per_day: int
    timetable: WeeklyTimetable
    subjects: tuple[Subject, ...] = ()
    name: Optional[str] = None
    verified_by: Optional[str] = None
    updated_at: int = 0

    @property
    def class_key(self) -> ClassKey:
        return ClassKey(branch=self.branch, division=self.division, semester=self.semester)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.id,
            "branch": self.branch,
            "division": self.division,
            "semester": self.semester,
            "periodsPerDay": self.periods_per_day,
            "subjects": [s.to_document() for s in self.subjects],
            "timetable": self.timetable.to_document(),
            "updatedAt": self.updated_at,
        }
        if self.name:
            doc["name"] = self.name
        if self.verified_by:
            doc["verifiedBy"] = self.verified_by
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "TimetableTemplate":
        key = ClassKey(branch=str(doc["branch"]), division=str(doc["division"]), semester=str(doc["semester"]))
        timetable_doc = dict(doc.get("timetable") or {})
        timetable_doc.setdefault("semesterId", key.semester)
        timetable_doc.setdefault("periodsPerDay", doc.get("periodsPerDay"))
        timetable = WeeklyTimetable.from_document(timetable_doc)
        return cls(
            id=str(doc.get("id") or key.template_id),
            branch=key.branch,
            division=key.division,
            semester=key.semester,
            periods_per_day=int(doc.get("periodsPerDay") or timetable.periods_per_day),
            timetable=timetable,
            subjects=tuple(Subject.from_document(s) for s in doc.get("subjects") or []),
            name=doc.get("name") or None,
            verified_by=doc.get("verifiedBy") or None,
            updated_at=int(doc.get("updatedAt") or 0),
        )
