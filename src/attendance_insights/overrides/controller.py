from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_role, current_uid, handle_errors, json_body, json_ok, parse_document, query_arg
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ClassChange, Holiday


def register(app: Flask, container: Container) -> None:
    service = container.override_service

    @app.get("/api/holidays", endpoint="holidays_list")
    @handle_errors
    def holidays_list():
        holidays = service.list_holidays(query_arg("start"), query_arg("end"))
        return json_ok({"holidays": [h.to_document() for h in holidays]})

    @app.post("/api/holidays", endpoint="holidays_set")
    @handle_errors
    def holidays_set():
        current_uid()
        holiday = parse_document(Holiday.from_document, json_body(), "holiday")
        stored = service.set_holiday(current_role=current_role(), holiday=holiday)
        return json_ok({"holiday": stored.to_document()})

    @app.get("/api/class-changes", endpoint="class_changes_list")
    @handle_errors
    def class_changes_list():
        on = query_arg("date")
        if on:
            change = service.get_class_change(on)
            return json_ok({"change": change.to_document() if change else None})
        changes = service.list_class_changes(query_arg("start"), query_arg("end"))
        return json_ok({"changes": [c.to_document() for c in changes]})

    @app.post("/api/class-changes", endpoint="class_changes_set")
    @handle_errors
    def class_changes_set():
        current_uid()
        change = parse_document(ClassChange.from_document, json_body(), "class change")
        service.set_class_change(current_role=current_role(), change=change)
        return json_ok({"change": change.to_document()})

    @app.get("/api/user-class-changes", endpoint="user_class_changes_get")
    @handle_errors
    def user_class_changes_get():
        uid = current_uid()
        on = query_arg("date")
        if not on:
            raise ValidationError("date is required")
        change = service.get_user_class_change(uid, on)
        return json_ok({"change": change.to_document() if change else None})

    @app.post("/api/user-class-changes", endpoint="user_class_changes_set")
    @handle_errors
    def user_class_changes_set():
        uid = current_uid()
        change = parse_document(ClassChange.from_document, json_body(), "class change")
        service.set_user_class_change(uid, change)
        return json_ok({"change": change.to_document()})

    @app.delete("/api/user-class-changes", endpoint="user_class_changes_clear")
    @handle_errors
    def user_class_changes_clear():
        uid = current_uid()
        on = query_arg("date")
        if not on:
            raise ValidationError("date is required")
        service.clear_user_class_change(uid, parse_iso_date(on))
        return json_ok()
