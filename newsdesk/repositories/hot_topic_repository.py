from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Final

from sqlalchemy import case, delete, insert, select, update
from sqlalchemy.exc import DBAPIError

from newsdesk.db.base import utcnow
from newsdesk.db.models import TRENDING_THRESHOLD, HotTopic
from newsdesk.repositories.base import BaseRepository, day_end, day_start
from newsdesk.repositories.errors import EntityNotFoundError, InvalidPayloadError
from newsdesk.repositories.validation import ensure_uuid

HOT_TOPIC_FIELDS: Final[frozenset[str]] = frozenset(
    {"keyword", "volume", "source", "related_articles"}
)


@dataclass(frozen=True)
class HotTopicFilter:
    source: str | None = None
    min_volume: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    limit: int | None = None


class HotTopicRepository(BaseRepository[HotTopic]):
    async def get_all(self, filters: HotTopicFilter) -> list[HotTopic]:
        stmt = select(HotTopic)
        if filters.source:
            stmt = stmt.where(HotTopic.source.ilike(f"%{filters.source}%"))
        if filters.min_volume is not None:
            stmt = stmt.where(HotTopic.volume >= filters.min_volume)
        if filters.start_date is not None:
            stmt = stmt.where(HotTopic.created_at >= day_start(filters.start_date))
        if filters.end_date is not None:
            stmt = stmt.where(HotTopic.created_at <= day_end(filters.end_date))
        stmt = stmt.order_by(HotTopic.created_at.desc(), HotTopic.id)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def search(self, query: str, *, limit: int = 20) -> list[HotTopic]:
        """Topics whose keyword contains ``query`` (case-insensitive), loudest first."""
        if not query.strip():
            raise InvalidPayloadError("Search query cannot be empty")
        stmt = (
            select(HotTopic)
            .where(HotTopic.keyword.ilike(f"%{query.strip()}%"))
            .order_by(HotTopic.volume.desc(), HotTopic.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def trending(self, *, limit: int = 10) -> list[HotTopic]:
        stmt = select(HotTopic).order_by(HotTopic.volume.desc(), HotTopic.id).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, topic_id: str | uuid.UUID) -> HotTopic:
        topic_uuid = ensure_uuid(topic_id)
        topic = await self._session.get(HotTopic, topic_uuid)
        if topic is None:
            raise EntityNotFoundError("HotTopic", topic_uuid)
        return topic

    async def create(self, values: Mapping[str, Any]) -> HotTopic:
        data = self._clean(values)
        if not data.get("keyword"):
            raise InvalidPayloadError("Hot topic keyword is required")
        data.setdefault("volume", 0)
        data.setdefault("related_articles", [])
        try:
            result = await self._session.execute(
                insert(HotTopic).values(**data).returning(HotTopic)
            )
        except DBAPIError as exc:
            raise self._database_error("create hot topic", exc) from exc
        return result.scalar_one()

    async def update(self, topic_id: str | uuid.UUID, values: Mapping[str, Any]) -> HotTopic:
        topic_uuid = ensure_uuid(topic_id)
        data = self._clean(values)
        if not data:
            raise InvalidPayloadError("At least one field must be provided")
        if "keyword" in data and not data["keyword"]:
            raise InvalidPayloadError("Hot topic keyword cannot be empty")
        return await self._update_returning(topic_uuid, data, "update hot topic")

    async def increment_volume(self, topic_id: str | uuid.UUID, by: int = 1) -> HotTopic:
        topic_uuid = ensure_uuid(topic_id)
        return await self._update_returning(
            topic_uuid, {"volume": HotTopic.volume + by}, "increment hot topic volume"
        )

    async def mark_trending(self, topic_id: str | uuid.UUID) -> HotTopic:
        """Raise the volume to the trending threshold unless it is already above it."""
        topic_uuid = ensure_uuid(topic_id)
        volume = case(
            (HotTopic.volume < TRENDING_THRESHOLD, TRENDING_THRESHOLD), else_=HotTopic.volume
        )
        return await self._update_returning(topic_uuid, {"volume": volume}, "mark hot topic")

    async def archive(self, topic_id: str | uuid.UUID) -> HotTopic:
        topic_uuid = ensure_uuid(topic_id)
        return await self._update_returning(topic_uuid, {"volume": 0}, "archive hot topic")

    async def delete(self, topic_id: str | uuid.UUID) -> None:
        topic_uuid = ensure_uuid(topic_id)
        try:
            deleted = await self._session.scalar(
                delete(HotTopic).where(HotTopic.id == topic_uuid).returning(HotTopic.id)
            )
        except DBAPIError as exc:
            raise self._database_error("delete hot topic", exc) from exc
        if deleted is None:
            raise EntityNotFoundError("HotTopic", topic_uuid)

    @staticmethod
    def _clean(values: Mapping[str, Any]) -> dict[str, Any]:
        data = {
            key: value
            for key, value in values.items()
            if key in HOT_TOPIC_FIELDS and value is not None
        }
        if "volume" in data and data["volume"] < 0:
            raise InvalidPayloadError("Hot topic volume cannot be negative")
        if "related_articles" in data:
            data["related_articles"] = [str(item) for item in data["related_articles"]]
        return data

    async def _update_returning(
        self, topic_uuid: uuid.UUID, data: Mapping[str, Any], action: str
    ) -> HotTopic:
        stmt = (
            update(HotTopic)
            .where(HotTopic.id == topic_uuid)
            .values(**data, updated_at=utcnow())
            .returning(HotTopic)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self._session.execute(stmt)
        except DBAPIError as exc:
            raise self._database_error(action, exc) from exc
        topic = result.scalar_one_or_none()
        if topic is None:
            raise EntityNotFoundError("HotTopic", topic_uuid)
        return topic
