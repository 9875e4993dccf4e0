from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..common.datetime_utils import format_iso_date, parse_iso_date


@dataclass(frozen=True)
class Holiday:
    """Global closure record for one date.

    ``early_close_after_period`` is the last period index that still runs;
    ``is_holiday`` cancels the whole day and wins over an early close.
    """

    date: date
    is_holiday: Optional[bool] = None
    early_close_after_period: Optional[int] = None
    reason: Optional[str] = None

    def cancels(self, period_index: int) -> bool:
        if self.is_holiday:
            return True
        return self.early_close_after_period is not None and period_index > self.early_close_after_period

    def merged_over(self, existing: Optional["Holiday"]) -> "Holiday":
        """Field-wise merge: fields left unset here keep the existing value."""
        if existing is None:
            return self
        return Holiday(
            date=self.date,
            is_holiday=self.is_holiday if self.is_holiday is not None else existing.is_holiday,
            early_close_after_period=(
                self.early_close_after_period
                if self.early_close_after_period is not None
                else existing.early_close_after_period
            ),
            reason=self.reason if self.reason is not None else existing.reason,
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"date": format_iso_date(self.date)}
        if self.is_holiday is not None:
            doc["isHoliday"] = self.is_holiday
        if self.early_close_after_period is not None:
            doc["earlyCloseAfterPeriod"] = self.early_close_after_period
        if self.reason is not None:
            doc["reason"] = self.reason
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Holiday":
        early = doc.get("earlyCloseAfterPeriod")
        is_holiday = doc.get("isHoliday")
        return cls(
            date=parse_iso_date(doc["date"]),
            is_holiday=None if is_holiday is None else bool(is_holiday),
            early_close_after_period=None if early is None else int(early),
            reason=doc.get("reason"),
        )


@dataclass(frozen=True)
class PeriodOverride:
    period_index: int
    subject_id: Optional[str] = None
    cancelled: bool = False

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"periodIndex": self.period_index}
        if self.subject_id:
            doc["subjectId"] = self.subject_id
        if self.cancelled:
            doc["cancelled"] = True
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PeriodOverride":
        return cls(
            period_index=int(doc["periodIndex"]),
            subject_id=doc.get("subjectId") or None,
            cancelled=bool(doc.get("cancelled", False)),
        )


@dataclass(frozen=True)
class ClassChange:
    """Date-scoped period interchanges; used for both global and per-user records."""

    date: date
    overrides: tuple[PeriodOverride, ...] = ()

    def override_for(self, period_index: int) -> Optional[PeriodOverride]:
        for o in self.overrides:
            if o.period_index == period_index:
                return o
        return None

    def to_document(self) -> dict[str, Any]:
        return {
            "date": format_iso_date(self.date),
            "overrides": [o.to_document() for o in self.overrides],
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ClassChange":
        return cls(
            date=parse_iso_date(doc["date"]),
            overrides=tuple(PeriodOverride.from_document(o) for o in doc.get("overrides") or []),
        )
