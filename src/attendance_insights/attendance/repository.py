from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceLog


class AttendanceRepository(Protocol):
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
        """Upsert by (uid, date, period_index); the latest mark wins."""

        raise NotImplementedError

    def list_attendance(
        self,
        uid: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceLog]:
        raise NotImplementedError
