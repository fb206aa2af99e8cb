"""Turns a finished Dify workflow callback into a pending article."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Final

from newsdesk.core.status import ArticleStatus
from newsdesk.db.models import Article
from newsdesk.repositories.article_repository import ArticleRepository
from newsdesk.repositories.errors import InvalidPayloadError

logger = logging.getLogger(__name__)

DEFAULT_COVER_IMAGE: Final[str] = (
    "https://img0.baidu.com/it/u=4160253413,3711804954&fm=253&fmt=auto&app=138&f=JPEG?w=708&h=500"
)
DIFY_ARTICLE_CATEGORY: Final[str] = "区块链"
DIFY_ARTICLE_SOURCE: Final[str] = "Dify AI"
SUMMARY_PREVIEW_LENGTH: Final[int] = 200
MAX_TITLE_KEYWORDS: Final[int] = 5

_TITLE_PUNCTUATION = re.compile("[：，。？！\"\"''（）“”‘’]")


def extract_title_keywords(title: str) -> list[str]:
    """Up to five 2-10 character words of the title, punctuation treated as spaces."""
    words = _TITLE_PUNCTUATION.sub(" ", title).split(" ")
    return [word for word in words if 2 <= len(word) <= 10][:MAX_TITLE_KEYWORDS]


def cover_image_from(images: Any) -> str:
    if isinstance(images, list) and images:
        first = images[0]
        if isinstance(first, Mapping) and first.get("url"):
            return str(first["url"])
    return DEFAULT_COVER_IMAGE


def summary_from(describe: Any, content: str) -> str:
    if describe:
        return str(describe)
    return content[:SUMMARY_PREVIEW_LENGTH] + "..."


class DifyIngestService:
    def __init__(self, articles: ArticleRepository) -> None:
        self._articles = articles

    async def ingest(self, payload: Mapping[str, Any]) -> Article:
        """Store the callback as an article awaiting review.

        Raises:
            InvalidPayloadError: If title or content is missing.
        """
        title = payload.get("title")
        content = payload.get("content")
        if not title or not content:
            raise InvalidPayloadError("Callback requires both title and content")

        logger.info("Received Dify callback for '%s'", title)
        article = await self._articles.create(
            {
                "title": str(title),
                "content": str(content),
                "summary": summary_from(payload.get("describe"), str(content)),
                "cover_image": cover_image_from(payload.get("image")),
                "category": DIFY_ARTICLE_CATEGORY,
                "keywords": extract_title_keywords(str(title)),
                "status": ArticleStatus.PENDING.value,
                "source": DIFY_ARTICLE_SOURCE,
            }
        )
        logger.info("Saved Dify article %s", article.id)
        return article
