from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import format_iso_date
from .model import ClassChange, Holiday


def user_class_change_doc_id(uid: str, on: date) -> str:
    return f"{uid}_{format_iso_date(on)}"


class HolidayRepository(Protocol):
    def get_holiday(self, on: date) -> Optional[Holiday]:
        raise NotImplementedError

    def set_holiday(self, holiday: Holiday) -> Holiday:
        """Merge-upsert keyed by date; returns the stored record."""

        raise NotImplementedError

    def list_holidays(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        raise NotImplementedError


class ClassChangeRepository(Protocol):
    # Global interchanges, keyed by date
    def get_class_change(self, on: date) -> Optional[ClassChange]:
        raise NotImplementedError

    def set_class_change(self, change: ClassChange) -> None:
        raise NotImplementedError

    def list_class_changes(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[ClassChange]:
        raise NotImplementedError

    # Per-user interchanges, keyed by uid + date
    def get_user_class_change(self, uid: str, on: date) -> Optional[ClassChange]:
        raise NotImplementedError

    def set_user_class_change(self, uid: str, change: ClassChange) -> None:
        raise NotImplementedError
