from __future__ import annotations

from flask import Flask

from ..common.http import current_uid, handle_errors, json_body, json_ok, parse_document
from ..container import Container
from ..core.exceptions import ValidationError
from .model import Subject, WeeklyTimetable


def _parse_timetable(doc, semester_id: str) -> WeeklyTimetable:
    return parse_document(WeeklyTimetable.from_document, doc, "timetable").with_semester(semester_id)


def _parse_subjects(items) -> list[Subject]:
    if not isinstance(items, list):
        raise ValidationError("subjects must be a list")
    return [parse_document(Subject.from_document, s, "subject") for s in items]


def register(app: Flask, container: Container) -> None:
    service = container.timetable_service

    @app.get("/api/timetable/<semester_id>", endpoint="timetable_get")
    @handle_errors
    def timetable_get(semester_id: str):
        timetable = service.get(current_uid(), semester_id)
        return json_ok({"timetable": timetable.to_document() if timetable else None})

    @app.post("/api/timetable/<semester_id>", endpoint="timetable_save")
    @handle_errors
    def timetable_save(semester_id: str):
        uid = current_uid()
        body = json_body()
        timetable = _parse_timetable(body.get("timetable", body), semester_id)
        return json_ok({"id": service.save(uid, timetable)})

    @app.delete("/api/timetable/<semester_id>", endpoint="timetable_delete")
    @handle_errors
    def timetable_delete(semester_id: str):
        service.delete(current_uid(), semester_id)
        return json_ok()

    @app.post("/api/attendance/setup", endpoint="attendance_setup")
    @handle_errors
    def attendance_setup():
        uid = current_uid()
        body = json_body()
        semester_id = str(body.get("semesterId") or "")
        doc_id = service.setup_semester(
            uid,
            semester_id,
            _parse_subjects(body.get("subjects") or []),
            _parse_timetable(body.get("timetable"), semester_id),
        )
        return json_ok({"id": doc_id}, 201)

    @app.get("/api/subjects/<semester_id>", endpoint="subjects_get")
    @handle_errors
    def subjects_get(semester_id: str):
        subjects = service.get_subjects(current_uid(), semester_id)
        return json_ok({"subjects": [s.to_document() for s in subjects]})

    @app.post("/api/subjects/<semester_id>", endpoint="subjects_save")
    @handle_errors
    def subjects_save(semester_id: str):
        uid = current_uid()
        subjects = _parse_subjects(json_body().get("subjects"))
        service.save_subjects(uid, semester_id, subjects)
        return json_ok({"count": len(subjects)})
