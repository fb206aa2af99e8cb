from __future__ import annotations

from typing import Final

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

# Search volume at or above which a topic counts as trending.
TRENDING_THRESHOLD: Final[int] = 10000


class HotTopic(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "hot_topics"

    keyword: Mapped[str] = mapped_column(String(200), index=True)
    volume: Mapped[int] = mapped_column(Integer, default=0, server_default="0", index=True)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    related_articles: Mapped[list[str]] = mapped_column(JSON, default=list)

    @property
    def is_trending(self) -> bool:
        return self.volume >= TRENDING_THRESHOLD
