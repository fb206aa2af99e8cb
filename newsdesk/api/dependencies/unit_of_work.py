"""Unit of Work: one transaction per request, session-scoped repositories from registry."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any, cast

from fastapi import Request
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.db.connection import ConnectionManager
from newsdesk.repositories import (
    AITaskRepository,
    ArticleRepository,
    HotTopicRepository,
    ImageRepository,
    TemplateRepository,
)
from newsdesk.repositories.base import db_error_code
from newsdesk.repositories.errors import DatabaseOperationError, DatabaseUnavailableError

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Holds the request's session and exposes session-scoped repositories from the registry."""

    def __init__(self, session: AsyncSession, services: Mapping[str, Any]) -> None:
        self._session = session
        self._services = services
        self._resolved: dict[str, Any] = {}

    @property
    def session(self) -> AsyncSession:
        return self._session

    def _resolve(self, key: str) -> Any:
        if key not in self._resolved:
            service = self._services[key]
            self._resolved[key] = service(self._session) if callable(service) else service
        return self._resolved[key]

    @property
    def articles(self) -> ArticleRepository:
        return cast(ArticleRepository, self._resolve("articles"))

    @property
    def templates(self) -> TemplateRepository:
        return cast(TemplateRepository, self._resolve("templates"))

    @property
    def hot_topics(self) -> HotTopicRepository:
        return cast(HotTopicRepository, self._resolve("hot_topics"))

    @property
    def ai_tasks(self) -> AITaskRepository:
        return cast(AITaskRepository, self._resolve("ai_tasks"))

    @property
    def images(self) -> ImageRepository:
        return cast(ImageRepository, self._resolve("images"))


def get_connection_manager(request: Request) -> ConnectionManager:
    return cast(ConnectionManager, request.app.state.connections)


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception.

    Routes depend on it with ``scope="function"`` so the commit finishes, and can
    still fail the request, before the response is sent.
    """
    request_id = getattr(request.state, "request_id", None)
    client = get_connection_manager(request).get_client(request_id)
    if client is None:
        raise DatabaseUnavailableError()
    async with client.session() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except DBAPIError as exc:
            await session.rollback()
            logger.error("Failed to commit request transaction: %s", exc.orig)
            raise DatabaseOperationError(
                f"Failed to commit transaction: {exc.orig}", db_error_code(exc)
            ) from exc
