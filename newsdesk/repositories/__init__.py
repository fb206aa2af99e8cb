from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.repositories.ai_task_repository import AITaskRepository
from newsdesk.repositories.article_repository import ArticleFilter, ArticleRepository
from newsdesk.repositories.hot_topic_repository import HotTopicFilter, HotTopicRepository
from newsdesk.repositories.image_repository import ImageRepository
from newsdesk.repositories.template_repository import TemplateRepository


def repository_registry() -> dict[str, Callable[[AsyncSession], Any]]:
    """Session-scoped repository factories, keyed by the name the unit of work exposes."""
    return {
        "articles": ArticleRepository,
        "templates": TemplateRepository,
        "hot_topics": HotTopicRepository,
        "ai_tasks": AITaskRepository,
        "images": ImageRepository,
    }


__all__ = [
    "AITaskRepository",
    "ArticleFilter",
    "ArticleRepository",
    "HotTopicFilter",
    "HotTopicRepository",
    "ImageRepository",
    "TemplateRepository",
    "repository_registry",
]
