"""Article persistence: filtered listing, CRUD and status transitions."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Final, Literal

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from newsdesk.core.status import ArticleStatus, can_transition, parse_article_status
from newsdesk.db.base import utcnow
from newsdesk.db.models import Article, HotTopic, Template
from newsdesk.repositories.base import BaseRepository, day_end, day_start, db_error_code
from newsdesk.repositories.errors import (
    EntityNotFoundError,
    InvalidPayloadError,
    InvalidStatusTransitionError,
    ReferenceNotFoundError,
    RepositoryError,
)
from newsdesk.repositories.validation import ensure_optional_uuid, ensure_uuid

ARTICLE_SORT_COLUMNS: Final = {
    "created_at": Article.created_at,
    "updated_at": Article.updated_at,
    "published_at": Article.published_at,
    "title": Article.title,
}

ARTICLE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "title",
        "summary",
        "content",
        "cover_image",
        "category",
        "keywords",
        "status",
        "author",
        "source",
        "published_at",
        "template_id",
        "hot_topic_id",
    }
)

# field -> (entity label, referenced model, FK constraint name)
_REFERENCES: Final = {
    "template_id": ("Template", Template, "articles_template_id_fkey"),
    "hot_topic_id": ("HotTopic", HotTopic, "articles_hot_topic_id_fkey"),
}


@dataclass(frozen=True)
class ArticleFilter:
    page: int = 1
    page_size: int = 10
    status: ArticleStatus | None = None
    category: str | None = None
    keyword: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    sort_by: str = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class ArticleRepository(BaseRepository[Article]):
    async def get_all(self, filters: ArticleFilter) -> tuple[list[Article], int]:
        sort_column = ARTICLE_SORT_COLUMNS.get(filters.sort_by)
        if sort_column is None:
            raise InvalidPayloadError(
                f"Unsupported sort field '{filters.sort_by}'",
                {"allowed": sorted(ARTICLE_SORT_COLUMNS)},
            )

        stmt = select(Article)
        if filters.status is not None:
            stmt = stmt.where(Article.status == ArticleStatus(filters.status).value)
        if filters.category:
            stmt = stmt.where(Article.category == filters.category)
        if filters.keyword:
            pattern = f"%{filters.keyword}%"
            stmt = stmt.where(or_(Article.title.ilike(pattern), Article.summary.ilike(pattern)))
        if filters.start_date is not None:
            stmt = stmt.where(Article.created_at >= day_start(filters.start_date))
        if filters.end_date is not None:
            stmt = stmt.where(Article.created_at <= day_end(filters.end_date))

        order = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()
        stmt = stmt.order_by(order, Article.id)
        return await self._paginate(stmt, filters.page, filters.page_size)

    async def get_by_id(self, article_id: str | uuid.UUID) -> Article:
        article_uuid = ensure_uuid(article_id)
        article = await self._session.get(Article, article_uuid)
        if article is None:
            raise EntityNotFoundError("Article", article_uuid)
        return article

    async def create(self, values: Mapping[str, Any]) -> Article:
        data = self._clean(values)
        if not data.get("title"):
            raise InvalidPayloadError("Article title is required")
        await self._ensure_references_exist(data)

        data.setdefault("status", ArticleStatus.DRAFT.value)
        data.setdefault("keywords", [])
        if data["status"] == ArticleStatus.PUBLISHED.value and not data.get("published_at"):
            data["published_at"] = utcnow()

        try:
            result = await self._session.execute(insert(Article).values(**data).returning(Article))
        except IntegrityError as exc:
            raise self._translate_integrity_error(exc, data, "create article") from exc
        except DBAPIError as exc:
            raise self._database_error("create article", exc) from exc
        return result.scalar_one()

    async def update(self, article_id: str | uuid.UUID, values: Mapping[str, Any]) -> Article:
        article_uuid = ensure_uuid(article_id)
        data = self._clean(values)
        if "title" in data and not data["title"]:
            raise InvalidPayloadError("Article title cannot be empty")
        await self._ensure_references_exist(data)

        current_status = await self._session.scalar(
            select(Article.status).where(Article.id == article_uuid)
        )
        if current_status is None:
            raise EntityNotFoundError("Article", article_uuid)

        target_status = data.get("status")
        if target_status is not None:
            if not can_transition(current_status, target_status):
                raise InvalidStatusTransitionError("article", current_status, target_status)
            if (
                target_status == ArticleStatus.PUBLISHED.value
                and current_status != target_status
                and not data.get("published_at")
            ):
                data["published_at"] = utcnow()

        data["updated_at"] = utcnow()
        stmt = (
            update(Article)
            .where(Article.id == article_uuid)
            .values(**data)
            .returning(Article)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as exc:
            raise self._translate_integrity_error(exc, data, "update article") from exc
        except DBAPIError as exc:
            raise self._database_error("update article", exc) from exc

        article = result.scalar_one_or_none()
        if article is None:
            raise EntityNotFoundError("Article", article_uuid)
        return article

    async def delete(self, article_id: str | uuid.UUID) -> None:
        article_uuid = ensure_uuid(article_id)
        try:
            deleted = await self._session.scalar(
                delete(Article).where(Article.id == article_uuid).returning(Article.id)
            )
        except DBAPIError as exc:
            raise self._database_error("delete article", exc) from exc
        if deleted is None:
            raise EntityNotFoundError("Article", article_uuid)

    def _clean(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Keep known columns, normalize the status and format-check referenced ids."""
        data = {key: value for key, value in values.items() if key in ARTICLE_FIELDS}
        if data.get("status") is not None:
            try:
                data["status"] = parse_article_status(str(data["status"])).value
            except ValueError as exc:
                raise InvalidPayloadError(str(exc)) from exc
        elif "status" in data:
            del data["status"]
        if "keywords" in data and data["keywords"] is None:
            data["keywords"] = []
        for field in _REFERENCES:
            if field in data:
                data[field] = ensure_optional_uuid(data[field], field)
        return data

    async def _ensure_references_exist(self, data: Mapping[str, Any]) -> None:
        for field, (entity, model, _constraint) in _REFERENCES.items():
            referenced_id = data.get(field)
            if referenced_id is None:
                continue
            found = await self._session.scalar(select(model.id).where(model.id == referenced_id))
            if found is None:
                raise ReferenceNotFoundError(field, entity, referenced_id)

    def _translate_integrity_error(
        self, exc: IntegrityError, data: Mapping[str, Any], action: str
    ) -> RepositoryError:
        """Map a foreign-key violation back onto the offending reference field."""
        message = str(exc.orig).lower()
        if db_error_code(exc) != "23503" and "foreign key" not in message:
            return self._database_error(action, exc)

        supplied = [
            (field, entity, data[field])
            for field, (entity, _model, _constraint) in _REFERENCES.items()
            if data.get(field) is not None
        ]
        for field, entity, referenced_id in supplied:
            constraint = _REFERENCES[field][2]
            if constraint in message or field in message:
                return ReferenceNotFoundError(field, entity, referenced_id)
        if supplied:
            field, entity, referenced_id = supplied[0]
            return ReferenceNotFoundError(field, entity, referenced_id)
        return self._database_error(action, exc)
