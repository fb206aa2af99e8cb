from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.core.status import ArticleStatus
from newsdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Article(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "articles"

    title: Mapped[str] = mapped_column(String(500))
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    keywords: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default=ArticleStatus.DRAFT.value, index=True)
    author: Mapped[str | None] = mapped_column(String(200), nullable=True)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    template_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("templates.id", ondelete="SET NULL", name="articles_template_id_fkey"),
        nullable=True,
        index=True,
    )
    hot_topic_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("hot_topics.id", ondelete="SET NULL", name="articles_hot_topic_id_fkey"),
        nullable=True,
        index=True,
    )
