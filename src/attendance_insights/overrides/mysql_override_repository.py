from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, normalize_mysql_date
from .model import ClassChange, Holiday, PeriodOverride
from .repository import ClassChangeRepository, HolidayRepository, user_class_change_doc_id


def _range_clause(column: str, start: Optional[date], end: Optional[date]) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append(f"{column} >= %s")
        params.append(start)
    if end is not None:
        clauses.append(f"{column} <= %s")
        params.append(end)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def _row_to_holiday(r: dict) -> Holiday:
    is_holiday = r.get("is_holiday")
    early = r.get("early_close_after_period")
    return Holiday(
        date=normalize_mysql_date(r["holiday_date"]),
        is_holiday=None if is_holiday is None else bool(is_holiday),
        early_close_after_period=None if early is None else int(early),
        reason=r.get("reason"),
    )


def _overrides_from_json(value) -> tuple[PeriodOverride, ...]:
    return tuple(PeriodOverride.from_document(o) for o in load_json(value) or [])


def _overrides_to_json(change: ClassChange) -> str:
    return dump_json([o.to_document() for o in change.overrides])


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_holiday(self, on: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_date, is_holiday, early_close_after_period, reason
                FROM holidays
                WHERE holiday_date=%s
                """,
                (on,),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    def set_holiday(self, holiday: Holiday) -> Holiday:
        # COALESCE keeps stored values for fields the caller left unset (merge semantics).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(holiday_date, is_holiday, early_close_after_period, reason)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_holiday=COALESCE(VALUES(is_holiday), is_holiday),
                    early_close_after_period=COALESCE(VALUES(early_close_after_period), early_close_after_period),
                    reason=COALESCE(VALUES(reason), reason)
                """,
                (
                    holiday.date,
                    None if holiday.is_holiday is None else int(holiday.is_holiday),
                    holiday.early_close_after_period,
                    holiday.reason,
                ),
            )
            cur.execute(
                """
                SELECT holiday_date, is_holiday, early_close_after_period, reason
                FROM holidays
                WHERE holiday_date=%s
                """,
                (holiday.date,),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else holiday

    def list_holidays(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        where, params = _range_clause("holiday_date", start, end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_date, is_holiday, early_close_after_period, reason
                FROM holidays
                {where}
                ORDER BY holiday_date ASC
                """,
                tuple(params),
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]


class MySQLClassChangeRepository(ClassChangeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_class_change(self, on: date) -> Optional[ClassChange]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT change_date, overrides FROM class_changes WHERE change_date=%s", (on,))
            r = fetchone(cur)
            if not r:
                return None
            return ClassChange(date=normalize_mysql_date(r["change_date"]), overrides=_overrides_from_json(r["overrides"]))

    def set_class_change(self, change: ClassChange) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_changes(change_date, overrides)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE overrides=VALUES(overrides)
                """,
                (change.date, _overrides_to_json(change)),
            )

    def list_class_changes(self, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[ClassChange]:
        where, params = _range_clause("change_date", start, end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT change_date, overrides
                FROM class_changes
                {where}
                ORDER BY change_date ASC
                """,
                tuple(params),
            )
            return [
                ClassChange(date=normalize_mysql_date(r["change_date"]), overrides=_overrides_from_json(r["overrides"]))
                for r in fetchall(cur)
            ]

    def get_user_class_change(self, uid: str, on: date) -> Optional[ClassChange]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT change_date, overrides FROM user_class_changes WHERE doc_id=%s",
                (user_class_change_doc_id(uid, on),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassChange(date=normalize_mysql_date(r["change_date"]), overrides=_overrides_from_json(r["overrides"]))

    def set_user_class_change(self, uid: str, change: ClassChange) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_class_changes(doc_id, uid, change_date, overrides)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE overrides=VALUES(overrides)
                """,
                (user_class_change_doc_id(uid, change.date), uid, change.date, _overrides_to_json(change)),
            )
