from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import Weekday, format_iso_date, parse_optional_date
from ..core.constants import DAY_KEYS


@dataclass(frozen=True)
class PeriodDef:
    """One timetable slot: subject taught in period ``index`` (0-based)."""

    index: int
    subject_id: str
    label: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"index": self.index, "subjectId": self.subject_id}
        if self.label:
            doc["label"] = self.label
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PeriodDef":
        return cls(
            index=int(doc["index"]),
            subject_id=str(doc.get("subjectId") or ""),
            label=doc.get("label") or None,
        )


@dataclass(frozen=True)
class DayTimetable:
    enabled: bool = True
    periods: tuple[PeriodDef, ...] = ()

    def period_at(self, index: int) -> Optional[PeriodDef]:
        for p in self.periods:
            if p.index == index:
                return p
        return None

    def to_document(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "periods": [p.to_document() for p in self.periods]}

    @classmethod
    def from_document(cls, doc: Optional[dict[str, Any]]) -> Optional["DayTimetable"]:
        if doc is None:
            return None
        return cls(
            enabled=bool(doc.get("enabled", False)),
            periods=tuple(PeriodDef.from_document(p) for p in doc.get("periods") or []),
        )


@dataclass(frozen=True)
class WeeklyTimetable:
    """Recurring Monday-Saturday schedule of one user for one semester."""

    semester_id: str
    periods_per_day: int
    mon: Optional[DayTimetable] = None
    tue: Optional[DayTimetable] = None
    wed: Optional[DayTimetable] = None
    thu: Optional[DayTimetable] = None
    fri: Optional[DayTimetable] = None
    sat: Optional[DayTimetable] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    locked: bool = False

    def day(self, weekday: Weekday) -> Optional[DayTimetable]:
        key = weekday.day_key
        if key is None:
            return None
        return getattr(self, key)

    def days(self) -> dict[str, Optional[DayTimetable]]:
        return {key: getattr(self, key) for key in DAY_KEYS}

    def periods_for(self, day: DayTimetable) -> int:
        """Number of periods to walk on ``day``.

        Falls back to the day's own period count when no global count is set.
        """
        return int(self.periods_per_day or len(day.periods))

    def with_semester(self, semester_id: str) -> "WeeklyTimetable":
        return replace(self, semester_id=semester_id)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "semesterId": self.semester_id,
            "periodsPerDay": self.periods_per_day,
            "locked": self.locked,
        }
        for key, day in self.days().items():
            if day is not None:
                doc[key] = day.to_document()
        if self.start_date:
            doc["startDate"] = format_iso_date(self.start_date)
        if self.end_date:
            doc["endDate"] = format_iso_date(self.end_date)
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "WeeklyTimetable":
        days = {key: DayTimetable.from_document(doc.get(key)) for key in DAY_KEYS}
        return cls(
            semester_id=str(doc.get("semesterId") or ""),
            periods_per_day=int(doc.get("periodsPerDay") or 0),
            start_date=parse_optional_date(doc.get("startDate")),
            end_date=parse_optional_date(doc.get("endDate")),
            locked=bool(doc.get("locked", False)),
            **days,
        )


@dataclass(frozen=True)
class Subject:
    """Catalog entry; purely descriptive, never needed for resolution."""

    id: str
    name: Optional[str] = None
    color: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"id": self.id}
        if self.name:
            doc["name"] = self.name
        if self.color:
            doc["color"] = self.color
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Subject":
        return cls(id=str(doc.get("id") or ""), name=doc.get("name") or None, color=doc.get("color") or None)

