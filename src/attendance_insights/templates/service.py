from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Union

from ..common.datetime_utils import epoch_millis, now_local
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..timetables.service import TimetableService, validate_timetable
from .model import ClassKey, TimetableTemplate
from .repository import TemplateRepository

logger = logging.getLogger(__name__)


class TemplateService:
    def __init__(self, templates: TemplateRepository, timetable_service: TimetableService):
        self._templates = templates
        self._timetable_service = timetable_service

    def upsert(
        self,
        *,
        current_role: Role,
        template: TimetableTemplate,
        verified_by: Optional[str] = None,
    ) -> TimetableTemplate:
        """Store a template under the id derived from its class key."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin role required")

        key = template.class_key
        for value, name in ((key.branch, "branch"), (key.division, "division"), (key.semester, "semester")):
            require_non_empty(value, name)

        stored = replace(
            template,
            id=key.template_id,
            timetable=template.timetable.with_semester(key.semester),
            verified_by=verified_by or template.verified_by,
            updated_at=epoch_millis(now_local()),
        )
        validate_timetable(stored.timetable)
        self._templates.upsert_template(stored)
        logger.info("Template %s saved", stored.id)
        return stored

    def delete(self, *, current_role: Role, template_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin role required")
        if not self._templates.delete_template(require_non_empty(template_id, "id")):
            raise NotFoundError(f"Template {template_id} not found")
        logger.info("Template %s deleted", template_id)

    def get_by_id(self, template_id: str) -> Optional[TimetableTemplate]:
        return self._templates.get_template(template_id)

    def get_by_class_key(self, key: ClassKey) -> Optional[TimetableTemplate]:
        return self._templates.get_template(key.template_id)

    def list(self) -> list[TimetableTemplate]:
        return list(self._templates.list_templates())

    def apply_to_user(self, uid: str, key: Union[ClassKey, str], semester_id: str) -> str:
        """Copy a template's timetable and subjects into the user's own semester."""
        template_id = key.template_id if isinstance(key, ClassKey) else str(key)
        template = self._templates.get_template(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")

        timetable = replace(template.timetable.with_semester(semester_id), locked=False)
        doc_id = self._timetable_service.save(uid, timetable)
        self._timetable_service.save_subjects(uid, semester_id, template.subjects)
        logger.info("Template %s applied to %s", template_id, doc_id)
        return doc_id
