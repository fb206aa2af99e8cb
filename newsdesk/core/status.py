"""Canonical status vocabularies and their display labels."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class ArticleStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"
    FAILED = "failed"


ARTICLE_STATUS_LABELS: Final[dict[ArticleStatus, str]] = {
    ArticleStatus.DRAFT: "草稿",
    ArticleStatus.PENDING: "待审核",
    ArticleStatus.PUBLISHED: "已发布",
    ArticleStatus.REJECTED: "不过审",
    ArticleStatus.FAILED: "发布失败",
}

_ARTICLE_STATUS_BY_LABEL: Final[dict[str, ArticleStatus]] = {
    label: status for status, label in ARTICLE_STATUS_LABELS.items()
}

ARTICLE_STATUS_TRANSITIONS: Final[dict[ArticleStatus, frozenset[ArticleStatus]]] = {
    ArticleStatus.DRAFT: frozenset({ArticleStatus.PENDING}),
    ArticleStatus.PENDING: frozenset(
        {ArticleStatus.PUBLISHED, ArticleStatus.REJECTED, ArticleStatus.FAILED}
    ),
    ArticleStatus.PUBLISHED: frozenset(),
    ArticleStatus.REJECTED: frozenset(),
    ArticleStatus.FAILED: frozenset(),
}


def article_status_label(status: ArticleStatus | str) -> str:
    """Return the display label for an article status."""
    return ARTICLE_STATUS_LABELS[ArticleStatus(status)]


def parse_article_status(value: str) -> ArticleStatus:
    """Accept either the API value (``"pending"``) or the display label (``"待审核"``).

    Raises:
        ValueError: If the value belongs to neither vocabulary.
    """
    cleaned = value.strip()
    if cleaned in _ARTICLE_STATUS_BY_LABEL:
        return _ARTICLE_STATUS_BY_LABEL[cleaned]
    try:
        return ArticleStatus(cleaned.lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ArticleStatus)
        raise ValueError(f"Unknown article status '{value}'. Expected one of: {allowed}") from None


def can_transition(current: ArticleStatus | str, target: ArticleStatus | str) -> bool:
    current_status = ArticleStatus(current)
    target_status = ArticleStatus(target)
    if current_status == target_status:
        return True
    return target_status in ARTICLE_STATUS_TRANSITIONS[current_status]


class AITaskType(StrEnum):
    COVER = "cover"
    TITLE = "title"
    CONTENT = "content"
    SUMMARY = "summary"


class AITaskStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


AI_TASK_STATUS_LABELS: Final[dict[AITaskStatus, str]] = {
    AITaskStatus.PENDING: "等待中",
    AITaskStatus.PROCESSING: "处理中",
    AITaskStatus.COMPLETED: "已完成",
    AITaskStatus.FAILED: "失败",
}


def ai_task_status_label(status: AITaskStatus | str) -> str:
    return AI_TASK_STATUS_LABELS[AITaskStatus(status)]


# target status -> statuses a task may be in when it is moved there
AI_TASK_STATUS_SOURCES: Final[dict[AITaskStatus, frozenset[AITaskStatus]]] = {
    AITaskStatus.PENDING: frozenset({AITaskStatus.PENDING}),
    AITaskStatus.PROCESSING: frozenset({AITaskStatus.PENDING, AITaskStatus.PROCESSING}),
    AITaskStatus.COMPLETED: frozenset({AITaskStatus.PROCESSING, AITaskStatus.COMPLETED}),
    AITaskStatus.FAILED: frozenset(
        {AITaskStatus.PENDING, AITaskStatus.PROCESSING, AITaskStatus.FAILED}
    ),
}
