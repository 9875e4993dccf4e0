from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import format_iso_date


@dataclass(frozen=True)
class SubjectStat:
    subject_id: str
    held: int
    present: int
    percent: float
    safe_bunks_left: int
    below_threshold: bool = False

    @property
    def absent(self) -> int:
        return max(0, self.held - self.present)

    def to_document(self) -> dict[str, Any]:
        return {
            "subjectId": self.subject_id,
            "held": self.held,
            "present": self.present,
            "absent": self.absent,
            "percent": self.percent,
            "safeBunksLeft": self.safe_bunks_left,
            "belowThreshold": self.below_threshold,
        }


@dataclass(frozen=True)
class InsightsReport:
    """Read-model returned to the reporting UI.

    ``total_held == 0`` means there is no data for the range, not an error.
    """

    by_subject: list[SubjectStat] = field(default_factory=list)
    overall_percent: float = 0.0
    total_held: int = 0
    total_present: int = 0
    min_required_percent: float = 0.0
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def has_data(self) -> bool:
        return self.total_held > 0

    @property
    def below_threshold(self) -> bool:
        return self.has_data and self.overall_percent < self.min_required_percent

    def to_document(self) -> dict[str, Any]:
        return {
            "bySubject": [s.to_document() for s in self.by_subject],
            "overallPercent": self.overall_percent,
            "totalHeld": self.total_held,
            "totalPresent": self.total_present,
            "minRequiredPercent": self.min_required_percent,
            "belowThreshold": self.below_threshold,
            "start": format_iso_date(self.start) if self.start else None,
            "end": format_iso_date(self.end) if self.end else None,
        }
