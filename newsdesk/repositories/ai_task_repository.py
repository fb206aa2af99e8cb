from __future__ import annotations

import uuid
from collections.abc import Collection, Mapping
from typing import Any, Final

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from newsdesk.core.status import AI_TASK_STATUS_SOURCES, AITaskStatus, AITaskType
from newsdesk.db.base import utcnow
from newsdesk.db.models import AITask, Article
from newsdesk.repositories.base import BaseRepository
from newsdesk.repositories.errors import (
    EntityNotFoundError,
    InvalidPayloadError,
    InvalidStatusTransitionError,
    ReferenceNotFoundError,
)
from newsdesk.repositories.validation import ensure_optional_uuid, ensure_uuid

AI_TASK_FIELDS: Final[frozenset[str]] = frozenset(
    {"name", "type", "status", "input_data", "result_data", "error_message", "article_id"}
)


class AITaskRepository(BaseRepository[AITask]):
    async def get_all(
        self,
        *,
        page: int = 1,
        page_size: int = 10,
        status: AITaskStatus | None = None,
        task_type: AITaskType | None = None,
    ) -> tuple[list[AITask], int]:
        stmt = select(AITask)
        if status is not None:
            stmt = stmt.where(AITask.status == AITaskStatus(status).value)
        if task_type is not None:
            stmt = stmt.where(AITask.type == AITaskType(task_type).value)
        stmt = stmt.order_by(AITask.created_at.desc(), AITask.id)
        return await self._paginate(stmt, page, page_size)

    async def get_by_id(self, task_id: str | uuid.UUID) -> AITask:
        task_uuid = ensure_uuid(task_id)
        task = await self._session.get(AITask, task_uuid)
        if task is None:
            raise EntityNotFoundError("AITask", task_uuid)
        return task

    async def create(self, values: Mapping[str, Any]) -> AITask:
        data = self._clean(values)
        if not data.get("name") or not data.get("type"):
            raise InvalidPayloadError("AI task name and type are required")
        await self._ensure_article_exists(data.get("article_id"))
        data.setdefault("status", AITaskStatus.PENDING.value)
        data.setdefault("input_data", {})
        try:
            result = await self._session.execute(insert(AITask).values(**data).returning(AITask))
        except IntegrityError as exc:
            raise ReferenceNotFoundError("article_id", "Article", data.get("article_id")) from exc
        except DBAPIError as exc:
            raise self._database_error("create AI task", exc) from exc
        return result.scalar_one()

    async def update(self, task_id: str | uuid.UUID, values: Mapping[str, Any]) -> AITask:
        task_uuid = ensure_uuid(task_id)
        data = self._clean(values)
        if not data:
            raise InvalidPayloadError("At least one field must be provided")
        await self._ensure_article_exists(data.get("article_id"))
        allowed_from = None
        if "status" in data:
            target = AITaskStatus(data["status"])
            allowed_from = AI_TASK_STATUS_SOURCES[target]
            if target in (AITaskStatus.COMPLETED, AITaskStatus.FAILED):
                data.setdefault("completed_at", func.coalesce(AITask.completed_at, utcnow()))
        return await self._update_returning(task_uuid, data, allowed_from)

    async def delete(self, task_id: str | uuid.UUID) -> None:
        task_uuid = ensure_uuid(task_id)
        try:
            deleted = await self._session.scalar(
                delete(AITask).where(AITask.id == task_uuid).returning(AITask.id)
            )
        except DBAPIError as exc:
            raise self._database_error("delete AI task", exc) from exc
        if deleted is None:
            raise EntityNotFoundError("AITask", task_uuid)

    async def start(self, task_id: str | uuid.UUID) -> AITask:
        """pending -> processing."""
        return await self._update_returning(
            ensure_uuid(task_id),
            {"status": AITaskStatus.PROCESSING.value},
            {AITaskStatus.PENDING},
        )

    async def complete(self, task_id: str | uuid.UUID, result: Mapping[str, Any]) -> AITask:
        """processing -> completed, storing ``result``."""
        return await self._update_returning(
            ensure_uuid(task_id),
            {
                "status": AITaskStatus.COMPLETED.value,
                "result_data": dict(result),
                "completed_at": utcnow(),
            },
            {AITaskStatus.PROCESSING},
        )

    async def fail(self, task_id: str | uuid.UUID, error: str) -> AITask:
        """pending|processing -> failed, recording ``error``."""
        return await self._update_returning(
            ensure_uuid(task_id),
            {
                "status": AITaskStatus.FAILED.value,
                "error_message": error,
                "completed_at": utcnow(),
            },
            {AITaskStatus.PENDING, AITaskStatus.PROCESSING},
        )

    @staticmethod
    def _clean(values: Mapping[str, Any]) -> dict[str, Any]:
        data = {key: value for key, value in values.items() if key in AI_TASK_FIELDS}
        try:
            if data.get("type") is not None:
                data["type"] = AITaskType(data["type"]).value
            if data.get("status") is not None:
                data["status"] = AITaskStatus(data["status"]).value
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc
        for field in ("type", "status", "input_data"):
            if field in data and data[field] is None:
                del data[field]
        if "article_id" in data:
            data["article_id"] = ensure_optional_uuid(data["article_id"], "article_id")
        return data

    async def _ensure_article_exists(self, article_id: uuid.UUID | None) -> None:
        if article_id is None:
            return
        found = await self._session.scalar(select(Article.id).where(Article.id == article_id))
        if found is None:
            raise ReferenceNotFoundError("article_id", "Article", article_id)

    async def _update_returning(
        self,
        task_uuid: uuid.UUID,
        data: Mapping[str, Any],
        allowed_from: Collection[AITaskStatus] | None,
    ) -> AITask:
        """UPDATE ... RETURNING, optionally only when the task is in one of ``allowed_from``."""
        stmt = update(AITask).where(AITask.id == task_uuid)
        if allowed_from is not None:
            stmt = stmt.where(AITask.status.in_([status.value for status in allowed_from]))
        stmt = (
            stmt.values(**data)
            .returning(AITask)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as exc:
            raise ReferenceNotFoundError("article_id", "Article", data.get("article_id")) from exc
        except DBAPIError as exc:
            raise self._database_error("update AI task", exc) from exc

        task = result.scalar_one_or_none()
        if task is not None:
            return task

        current = await self._session.scalar(select(AITask.status).where(AITask.id == task_uuid))
        if current is None:
            raise EntityNotFoundError("AITask", task_uuid)
        raise InvalidStatusTransitionError("AI task", current, str(data.get("status")))
