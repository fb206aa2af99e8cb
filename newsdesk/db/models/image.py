from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Image(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "images"

    file_name: Mapped[str] = mapped_column(String(512))
    original_name: Mapped[str] = mapped_column(String(512))
    mime_type: Mapped[str] = mapped_column(String(100))
    size: Mapped[int] = mapped_column(Integer)
    url: Mapped[str] = mapped_column(String(2048))
    storage_path: Mapped[str] = mapped_column(String(1024))
    article_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("articles.id", ondelete="SET NULL", name="images_article_id_fkey"),
        nullable=True,
        index=True,
    )
