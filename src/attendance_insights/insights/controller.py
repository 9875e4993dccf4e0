from __future__ import annotations

from flask import Flask

from ..common.http import current_uid, handle_errors, json_ok, query_arg
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.insights_service

    @app.get("/api/attendance/insights", endpoint="attendance_insights")
    @handle_errors
    def attendance_insights():
        uid = current_uid()
        semester_id = query_arg("semesterId")
        if not semester_id:
            raise ValidationError("semesterId is required")

        raw_percent = query_arg("minRequiredPercent")
        try:
            min_required = float(raw_percent) if raw_percent is not None else container.min_required_percent
        except ValueError:
            raise ValidationError(f"minRequiredPercent must be a number (got {raw_percent!r})")

        report = service.compute_insights(
            uid,
            semester_id,
            min_required,
            start=query_arg("start"),
            end=query_arg("end"),
        )
        return json_ok(report.to_document())
