from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import DateLike, parse_iso_date, parse_optional_date
from ..common.validators import require_non_empty, require_period_index, require_unique
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, InvalidRange, ValidationError
from .model import ClassChange, Holiday
from .repository import ClassChangeRepository, HolidayRepository

logger = logging.getLogger(__name__)


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Admin role required")


def _validate_change(change: ClassChange) -> None:
    indexes = [require_period_index(o.period_index) for o in change.overrides]
    require_unique(indexes, "periodIndex")


def _range(start: Optional[DateLike], end: Optional[DateLike]) -> tuple[Optional[date], Optional[date]]:
    lo, hi = parse_optional_date(start), parse_optional_date(end)
    if lo is not None and hi is not None and lo > hi:
        raise InvalidRange(f"Start {lo} is after end {hi}")
    return lo, hi


class OverrideService:
    def __init__(self, holidays: HolidayRepository, class_changes: ClassChangeRepository):
        self._holidays = holidays
        self._class_changes = class_changes

    # Holidays
    def set_holiday(self, *, current_role: Role, holiday: Holiday) -> Holiday:
        _require_admin(current_role)
        if holiday.early_close_after_period is not None:
            require_period_index(holiday.early_close_after_period, "earlyCloseAfterPeriod")
        if holiday.is_holiday is None and holiday.early_close_after_period is None and holiday.reason is None:
            raise ValidationError("Holiday needs isHoliday, earlyCloseAfterPeriod or reason")

        stored = self._holidays.set_holiday(holiday)
        logger.info("Holiday set for %s", stored.date)
        return stored

    def get_holiday(self, on: DateLike) -> Optional[Holiday]:
        return self._holidays.get_holiday(parse_iso_date(on))

    def list_holidays(self, start: Optional[DateLike] = None, end: Optional[DateLike] = None) -> list[Holiday]:
        return list(self._holidays.list_holidays(*_range(start, end)))

    # Global class changes
    def set_class_change(self, *, current_role: Role, change: ClassChange) -> None:
        _require_admin(current_role)
        _validate_change(change)
        self._class_changes.set_class_change(change)
        logger.info("Class change set for %s (%d overrides)", change.date, len(change.overrides))

    def get_class_change(self, on: DateLike) -> Optional[ClassChange]:
        return self._class_changes.get_class_change(parse_iso_date(on))

    def list_class_changes(
        self,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Sequence[ClassChange]:
        return list(self._class_changes.list_class_changes(*_range(start, end)))

    # Per-user class changes
    def get_user_class_change(self, uid: str, on: DateLike) -> Optional[ClassChange]:
        return self._class_changes.get_user_class_change(require_non_empty(uid, "uid"), parse_iso_date(on))

    def set_user_class_change(self, uid: str, change: ClassChange) -> None:
        uid = require_non_empty(uid, "uid")
        _validate_change(change)
        self._class_changes.set_user_class_change(uid, change)
        logger.info("User class change set uid=%s date=%s", uid, change.date)

    def clear_user_class_change(self, uid: str, on: DateLike) -> None:
        self.set_user_class_change(uid, ClassChange(date=parse_iso_date(on), overrides=()))
