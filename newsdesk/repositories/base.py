from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.db.base import Base
from newsdesk.repositories.errors import DatabaseOperationError

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_end(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=UTC)


def db_error_code(exc: DBAPIError) -> str | None:
    """SQLSTATE of the driver error when the driver exposes one."""
    orig: Any = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if isinstance(code, str):
            return code
    return None


class BaseRepository(Generic[ModelT]):
    """Shared plumbing for the per-entity repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _paginate(
        self, stmt: Select[tuple[ModelT]], page: int, page_size: int
    ) -> tuple[list[ModelT], int]:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = await self._session.scalar(count_stmt)
        result = await self._session.execute(
            stmt.offset((page - 1) * page_size).limit(page_size)
        )
        return list(result.scalars().all()), int(total or 0)

    def _database_error(self, action: str, exc: DBAPIError) -> DatabaseOperationError:
        logger.error("Database error while trying to %s: %s", action, exc.orig)
        return DatabaseOperationError(f"Failed to {action}: {exc.orig}", db_error_code(exc))
