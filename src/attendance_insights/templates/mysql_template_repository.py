from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import TimetableTemplate
from .repository import TemplateRepository


class MySQLTemplateRepository(TemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_template(self, template: TimetableTemplate) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO timetable_templates(doc_id, branch, division, semester, body, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE body=VALUES(body), updated_at=VALUES(updated_at)
                """,
                (
                    template.id,
                    template.branch,
                    template.division,
                    template.semester,
                    dump_json(template.to_document()),
                    int(template.updated_at),
                ),
            )

    def get_template(self, template_id: str) -> Optional[TimetableTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT body FROM timetable_templates WHERE doc_id=%s", (template_id,))
            r = fetchone(cur)
            if not r:
                return None
            return TimetableTemplate.from_document(load_json(r["body"]))

    def list_templates(self) -> Sequence[TimetableTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT body FROM timetable_templates ORDER BY doc_id ASC")
            return [TimetableTemplate.from_document(load_json(r["body"])) for r in fetchall(cur)]

    def delete_template(self, template_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetable_templates WHERE doc_id=%s", (template_id,))
            return cur.rowcount > 0
