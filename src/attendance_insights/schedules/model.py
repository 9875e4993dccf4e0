from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..core.enums import SlotKind, SlotSource
from ..overrides.model import ClassChange, Holiday


@dataclass(frozen=True)
class SlotResolution:
    """Effective outcome of one (date, period) slot.

    ``kind`` separates a scheduled class from a cancelled one and from a free
    period. ``cancelled`` keeps the older two-state view where anything that
    is not a scheduled class counts as cancelled.
    """

    period_index: int
    kind: SlotKind
    source: SlotSource
    subject_id: Optional[str] = None

    @classmethod
    def scheduled(cls, period_index: int, subject_id: str, source: SlotSource) -> "SlotResolution":
        return cls(period_index=period_index, kind=SlotKind.SCHEDULED, source=source, subject_id=subject_id)

    @classmethod
    def cancelled_by(cls, period_index: int, source: SlotSource) -> "SlotResolution":
        return cls(period_index=period_index, kind=SlotKind.CANCELLED, source=source)

    @classmethod
    def free(cls, period_index: int, source: SlotSource) -> "SlotResolution":
        return cls(period_index=period_index, kind=SlotKind.FREE, source=source)

    @property
    def is_scheduled(self) -> bool:
        return self.kind is SlotKind.SCHEDULED

    @property
    def cancelled(self) -> bool:
        return self.kind is not SlotKind.SCHEDULED

    def as_legacy(self) -> dict[str, Any]:
        return {"subjectId": self.subject_id, "cancelled": self.cancelled}

    def to_document(self) -> dict[str, Any]:
        return {
            "periodIndex": self.period_index,
            "subjectId": self.subject_id,
            "cancelled": self.cancelled,
            "kind": self.kind.value,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class DayOverrides:
    """Date-scoped records that can pre-empt the weekly timetable."""

    holiday: Optional[Holiday] = None
    user_change: Optional[ClassChange] = None
    global_change: Optional[ClassChange] = None
