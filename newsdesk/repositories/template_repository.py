from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Final

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import DBAPIError

from newsdesk.db.base import utcnow
from newsdesk.db.models import Template
from newsdesk.repositories.base import BaseRepository
from newsdesk.repositories.errors import EntityNotFoundError, InvalidPayloadError
from newsdesk.repositories.validation import ensure_uuid

TEMPLATE_FIELDS: Final[frozenset[str]] = frozenset({"name", "description", "category", "content"})


class TemplateRepository(BaseRepository[Template]):
    async def get_all(
        self,
        *,
        page: int = 1,
        page_size: int = 10,
        category: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Template], int]:
        stmt = select(Template)
        if category:
            stmt = stmt.where(Template.category == category)
        if search:
            stmt = stmt.where(Template.name.ilike(f"%{search}%"))
        stmt = stmt.order_by(Template.created_at.desc(), Template.id)
        return await self._paginate(stmt, page, page_size)

    async def get_by_id(self, template_id: str | uuid.UUID) -> Template:
        template_uuid = ensure_uuid(template_id)
        template = await self._session.get(Template, template_uuid)
        if template is None:
            raise EntityNotFoundError("Template", template_uuid)
        return template

    async def create(self, values: Mapping[str, Any]) -> Template:
        data = {key: value for key, value in values.items() if key in TEMPLATE_FIELDS}
        if not data.get("name") or not data.get("content"):
            raise InvalidPayloadError("Template name and content are required")
        data["usage_count"] = 0
        try:
            result = await self._session.execute(
                insert(Template).values(**data).returning(Template)
            )
        except DBAPIError as exc:
            raise self._database_error("create template", exc) from exc
        return result.scalar_one()

    async def update(self, template_id: str | uuid.UUID, values: Mapping[str, Any]) -> Template:
        template_uuid = ensure_uuid(template_id)
        data = {key: value for key, value in values.items() if key in TEMPLATE_FIELDS}
        for field in ("name", "content"):
            if field in data and not data[field]:
                raise InvalidPayloadError(f"Template {field} cannot be empty")
        data["updated_at"] = utcnow()
        return await self._update_returning(template_uuid, data, "update template")

    async def increment_usage(self, template_id: str | uuid.UUID) -> Template:
        """Atomically add one to ``usage_count`` and return the updated row."""
        template_uuid = ensure_uuid(template_id)
        data = {"usage_count": Template.usage_count + 1, "updated_at": utcnow()}
        return await self._update_returning(template_uuid, data, "increment template usage")

    async def delete(self, template_id: str | uuid.UUID) -> None:
        template_uuid = ensure_uuid(template_id)
        try:
            deleted = await self._session.scalar(
                delete(Template).where(Template.id == template_uuid).returning(Template.id)
            )
        except DBAPIError as exc:
            raise self._database_error("delete template", exc) from exc
        if deleted is None:
            raise EntityNotFoundError("Template", template_uuid)

    async def _update_returning(
        self, template_uuid: uuid.UUID, data: Mapping[str, Any], action: str
    ) -> Template:
        stmt = (
            update(Template)
            .where(Template.id == template_uuid)
            .values(**data)
            .returning(Template)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except DBAPIError as exc:
            raise self._database_error(action, exc) from exc
        template = result.scalar_one_or_none()
        if template is None:
            raise EntityNotFoundError("Template", template_uuid)
        return template
