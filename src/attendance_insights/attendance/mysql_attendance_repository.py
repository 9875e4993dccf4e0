from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date
from .model import AttendanceLog
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(uid, log_date, period_index, subject_id, status, marked_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    subject_id=VALUES(subject_id),
                    status=VALUES(status),
                    marked_at=VALUES(marked_at)
                """,
                (uid, on, int(period_index), subject_id, status.value, int(marked_at)),
            )
        return AttendanceLog(
            uid=uid,
            date=on,
            period_index=int(period_index),
            subject_id=subject_id,
            status=status,
            marked_at=int(marked_at),
        )

    def list_attendance(
        self,
        uid: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceLog]:
        clauses = ["uid=%s"]
        params: list[object] = [uid]
        if start is not None:
            clauses.append("log_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("log_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT uid, log_date, period_index, subject_id, status, marked_at
                FROM attendance_logs
                WHERE {where}
                ORDER BY log_date DESC, period_index ASC
                """,
                tuple(params),
            )
            return [
                AttendanceLog(
                    uid=r["uid"],
                    date=normalize_mysql_date(r["log_date"]),
                    period_index=int(r["period_index"]),
                    subject_id=r["subject_id"],
                    status=AttendanceStatus(r["status"]),
                    marked_at=int(r["marked_at"]),
                )
                for r in fetchall(cur)
            ]
