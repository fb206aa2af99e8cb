from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.exc import DBAPIError

from newsdesk.db.models import Article, Image
from newsdesk.repositories.base import BaseRepository
from newsdesk.repositories.errors import EntityNotFoundError, ReferenceNotFoundError
from newsdesk.repositories.validation import ensure_optional_uuid, ensure_uuid

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[Image]):
    async def ensure_table(self) -> None:
        """Create the ``images`` table if it does not exist yet."""
        connection = await self._session.connection()
        await connection.run_sync(
            lambda sync_conn: Image.__table__.create(sync_conn, checkfirst=True)
        )

    async def create(self, values: Mapping[str, Any]) -> Image:
        data = dict(values)
        data["article_id"] = ensure_optional_uuid(data.get("article_id"), "article_id")
        await self.ensure_table()
        if data["article_id"] is not None:
            found = await self._session.scalar(
                select(Article.id).where(Article.id == data["article_id"])
            )
            if found is None:
                raise ReferenceNotFoundError("article_id", "Article", data["article_id"])
        try:
            result = await self._session.execute(insert(Image).values(**data).returning(Image))
        except DBAPIError as exc:
            raise self._database_error("record uploaded image", exc) from exc
        image = result.scalar_one()
        logger.info("Recorded image %s at %s", image.id, image.storage_path)
        return image

    async def get_by_id(self, image_id: str | uuid.UUID) -> Image:
        image_uuid = ensure_uuid(image_id)
        image = await self._session.get(Image, image_uuid)
        if image is None:
            raise EntityNotFoundError("Image", image_uuid)
        return image
