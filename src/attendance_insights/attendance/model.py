from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..common.datetime_utils import format_iso_date
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one student's mark for one period of one day."""

    uid: str
    date: date
    period_index: int
    subject_id: str
    status: AttendanceStatus
    marked_at: int

    @property
    def slot_key(self) -> tuple[str, date, int]:
        return self.uid, self.date, self.period_index

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "date": format_iso_date(self.date),
            "periodIndex": self.period_index,
            "subjectId": self.subject_id,
            "status": self.status.value,
            "markedAt": self.marked_at,
        }


@dataclass(frozen=True)
class SkippedSlot:
    date: date
    period_index: int
    reason: str

    def to_document(self) -> dict[str, Any]:
        return {"date": format_iso_date(self.date), "periodIndex": self.period_index, "reason": self.reason}


@dataclass(frozen=True)
class BulkMarkResult:
    """Outcome of marking absences over a date range."""

    marked: list[AttendanceLog] = field(default_factory=list)
    skipped: list[SkippedSlot] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "marked": [log.to_document() for log in self.marked],
            "skipped": [s.to_document() for s in self.skipped],
        }
