"""Image upload: validation, storage and the ``images`` record."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Final

from starlette import status

from newsdesk.core.errors import ServiceError
from newsdesk.db.models import Image
from newsdesk.repositories.image_repository import ImageRepository
from newsdesk.repositories.validation import ensure_optional_uuid
from newsdesk.services.storage import StorageBackend, StorageError, StoredObject

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp"}
)
MAX_IMAGE_SIZE: Final[int] = 5 * 1024 * 1024

_WHITESPACE = re.compile(r"\s+")


class UploadValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


@dataclass(frozen=True)
class UploadResult:
    image: Image
    backend: str
    warning: str | None = None


def storage_file_name(original_name: str) -> str:
    """``<uuid4>-<original name with whitespace runs replaced by _>``."""
    return f"{uuid.uuid4()}-{_WHITESPACE.sub('_', original_name)}"


def validate_upload(content_type: str | None, size: int) -> None:
    """Raises UploadValidationError for disallowed types or files over 5 MB."""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise UploadValidationError(
            f"Unsupported file type: {content_type}",
            "UNSUPPORTED_FILE_TYPE",
            {"allowed": sorted(ALLOWED_IMAGE_TYPES)},
        )
    if size > MAX_IMAGE_SIZE:
        raise UploadValidationError(
            "File too large, maximum size is 5MB",
            "FILE_TOO_LARGE",
            {"size": size, "max_size": MAX_IMAGE_SIZE},
        )


class ImageUploadService:
    """Stores on the primary backend, falling back to the secondary one with a warning."""

    def __init__(
        self,
        images: ImageRepository,
        storage: StorageBackend,
        fallback: StorageBackend | None = None,
    ) -> None:
        self._images = images
        self._storage = storage
        self._fallback = fallback

    async def upload(
        self,
        *,
        original_name: str,
        content_type: str | None,
        data: bytes,
        article_id: str | None = None,
    ) -> UploadResult:
        validate_upload(content_type, len(data))
        assert content_type is not None
        ensure_optional_uuid(article_id or None, "article_id")
        file_name = storage_file_name(original_name)

        backend = self._storage
        warning = None
        try:
            stored = await backend.upload(file_name, data, content_type)
        except StorageError as exc:
            if self._fallback is None:
                raise
            logger.warning(
                "%s storage failed (%s), falling back to %s",
                backend.name,
                exc,
                self._fallback.name,
            )
            backend = self._fallback
            stored = await backend.upload(file_name, data, content_type)
            warning = f"Stored with the {backend.name} backend because {self._storage.name} failed"

        image = await self._record(stored, file_name, original_name, content_type, data, article_id)
        logger.info("Uploaded %s (%d bytes) via %s", file_name, len(data), backend.name)
        return UploadResult(image=image, backend=backend.name, warning=warning)

    async def _record(
        self,
        stored: StoredObject,
        file_name: str,
        original_name: str,
        content_type: str,
        data: bytes,
        article_id: str | None,
    ) -> Image:
        return await self._images.create(
            {
                "file_name": file_name,
                "original_name": original_name,
                "mime_type": content_type,
                "size": len(data),
                "url": stored.url,
                "storage_path": stored.storage_path,
                "article_id": article_id or None,
            }
        )
