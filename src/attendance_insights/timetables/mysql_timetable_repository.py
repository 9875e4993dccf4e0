from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .model import Subject, WeeklyTimetable
from .repository import SubjectRepository, TimetableRepository, timetable_doc_id


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_weekly_timetable(self, uid: str, semester_id: str) -> Optional[WeeklyTimetable]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM timetables WHERE doc_id=%s",
                (timetable_doc_id(uid, semester_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WeeklyTimetable.from_document(load_json(r["body"]))

    def upsert_weekly_timetable(self, uid: str, timetable: WeeklyTimetable) -> str:
        doc_id = timetable_doc_id(uid, timetable.semester_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO timetables(doc_id, uid, semester_id, body)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE body=VALUES(body)
                """,
                (doc_id, uid, timetable.semester_id, dump_json(timetable.to_document())),
            )
        return doc_id

    def delete_weekly_timetable(self, uid: str, semester_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetables WHERE doc_id=%s", (timetable_doc_id(uid, semester_id),))
            return cur.rowcount > 0


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_subjects(self, uid: str, semester_id: str) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT items FROM subjects WHERE doc_id=%s",
                (timetable_doc_id(uid, semester_id),),
            )
            r = fetchone(cur)
            if not r:
                return []
            return [Subject.from_document(item) for item in load_json(r["items"]) or []]

    def save_subjects(self, uid: str, semester_id: str, subjects: Sequence[Subject]) -> None:
        items = dump_json([s.to_document() for s in subjects])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO subjects(doc_id, uid, semester_id, items)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE items=VALUES(items)
                """,
                (timetable_doc_id(uid, semester_id), uid, semester_id, items),
            )
