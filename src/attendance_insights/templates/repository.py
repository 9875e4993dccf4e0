from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimetableTemplate


class TemplateRepository(Protocol):
    def upsert_template(self, template: TimetableTemplate) -> None:
        raise NotImplementedError

    def get_template(self, template_id: str) -> Optional[TimetableTemplate]:
        raise NotImplementedError

    def list_templates(self) -> Sequence[TimetableTemplate]:
        """All templates ordered by id."""

        raise NotImplementedError

    def delete_template(self, template_id: str) -> bool:
        raise NotImplementedError
