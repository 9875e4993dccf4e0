from __future__ import annotations

from flask import Flask

from ..common.http import current_uid, handle_errors, json_body, json_ok, query_arg
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import ValidationError


def _required(value, name: str) -> str:
    if value is None:
        raise ValidationError(f"{name} is required")
    return require_non_empty(str(value), name)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    resolver = container.resolver

    @app.get("/api/attendance/effective-subject", endpoint="attendance_effective_subject")
    @handle_errors
    def attendance_effective_subject():
        slot = resolver.resolve(
            current_uid(),
            _required(query_arg("semesterId"), "semesterId"),
            _required(query_arg("date"), "date"),
            _required(query_arg("periodIndex"), "periodIndex"),
        )
        return json_ok(slot.to_document())

    @app.get("/api/attendance/day", endpoint="attendance_day")
    @handle_errors
    def attendance_day():
        slots = resolver.resolve_day(
            current_uid(),
            _required(query_arg("semesterId"), "semesterId"),
            _required(query_arg("date"), "date"),
        )
        return json_ok({"slots": [s.to_document() for s in slots]})

    @app.post("/api/attendance/mark", endpoint="attendance_mark")
    @handle_errors
    def attendance_mark():
        uid = current_uid()
        body = json_body()
        log = service.mark(
            uid,
            _required(body.get("semesterId"), "semesterId"),
            _required(body.get("date"), "date"),
            body.get("periodIndex"),
            _required(body.get("status"), "status"),
            subject_id=body.get("subjectId") or None,
        )
        return json_ok(log.to_document())

    @app.post("/api/attendance/bulk-absence", endpoint="attendance_bulk_absence")
    @handle_errors
    def attendance_bulk_absence():
        uid = current_uid()
        body = json_body()
        periods = body.get("periods")
        if periods is not None and not isinstance(periods, list):
            raise ValidationError("periods must be a list")
        result = service.mark_absent_range(
            uid,
            _required(body.get("semesterId"), "semesterId"),
            _required(body.get("start"), "start"),
            _required(body.get("end"), "end"),
            periods=periods,
        )
        return json_ok(result.to_document())

    @app.get("/api/attendance/records", endpoint="attendance_records")
    @handle_errors
    def attendance_records():
        logs = service.list_records(current_uid(), query_arg("start"), query_arg("end"))
        return json_ok({"records": [log.to_document() for log in logs]})
