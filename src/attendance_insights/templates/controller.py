from __future__ import annotations

from flask import Flask

from ..common.http import current_role, current_uid, handle_errors, json_body, json_ok, parse_document, query_arg
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ClassKey, TimetableTemplate


def register(app: Flask, container: Container) -> None:
    service = container.template_service

    @app.get("/api/templates", endpoint="templates_get")
    @handle_errors
    def templates_get():
        template_id = query_arg("id")
        if template_id:
            template = service.get_by_id(template_id)
            return json_ok({"template": template.to_document() if template else None})

        branch, division, semester = query_arg("branch"), query_arg("division"), query_arg("semester")
        if branch and division and semester:
            template = service.get_by_class_key(ClassKey(branch=branch, division=division, semester=semester))
            return json_ok({"template": template.to_document() if template else None})

        return json_ok({"items": [t.to_document() for t in service.list()]})

    @app.post("/api/admin/templates", endpoint="admin_templates_upsert")
    @handle_errors
    def admin_templates_upsert():
        uid = current_uid()
        template = parse_document(TimetableTemplate.from_document, json_body(), "template")
        stored = service.upsert(current_role=current_role(), template=template, verified_by=uid)
        return json_ok({"template": stored.to_document()})

    @app.delete("/api/admin/templates", endpoint="admin_templates_delete")
    @handle_errors
    def admin_templates_delete():
        current_uid()
        template_id = query_arg("id")
        if not template_id:
            raise ValidationError("id is required")
        service.delete(current_role=current_role(), template_id=template_id)
        return json_ok()

    @app.post("/api/templates/apply", endpoint="templates_apply")
    @handle_errors
    def templates_apply():
        uid = current_uid()
        body = json_body()
        semester_id = str(body.get("semesterId") or "")
        if body.get("id"):
            key = str(body["id"])
        else:
            key = parse_document(
                lambda d: ClassKey(branch=str(d["branch"]), division=str(d["division"]), semester=str(d["semester"])),
                body,
                "class key",
            )
        return json_ok({"id": service.apply_to_user(uid, key, semester_id or _semester_of(key))})


def _semester_of(key) -> str:
    if isinstance(key, ClassKey):
        return key.semester
    raise ValidationError("semesterId is required")
