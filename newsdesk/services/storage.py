"""Object storage backends for uploaded images."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import httpx
from starlette import status

from newsdesk.core.errors import ServiceError

logger = logging.getLogger(__name__)

STORAGE_TIMEOUT_SECONDS: Final[float] = 30.0
CACHE_CONTROL_SECONDS: Final[str] = "3600"


class StorageError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message, "STORAGE_ERROR")


@dataclass(frozen=True)
class StoredObject:
    url: str
    storage_path: str


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    name: str = "storage"

    @abstractmethod
    async def upload(self, file_name: str, data: bytes, content_type: str) -> StoredObject:
        """Store ``data`` under ``file_name`` and return where it can be fetched."""
        raise NotImplementedError


class SupabaseStorage(StorageBackend):
    """Supabase Storage over its REST API; the bucket is created (public) if missing."""

    name = "supabase"

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        bucket: str,
        *,
        file_size_limit: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.file_size_limit = file_size_limit
        self._transport = transport
        self._bucket_ready = False

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "apikey": self.api_key}

    def public_url(self, file_name: str) -> str:
        return f"{self.endpoint}/storage/v1/object/public/{self.bucket}/{file_name}"

    async def ensure_bucket(self, client: httpx.AsyncClient) -> None:
        if self._bucket_ready:
            return
        response = await client.get(
            f"{self.endpoint}/storage/v1/bucket/{self.bucket}", headers=self._headers()
        )
        if response.is_success:
            self._bucket_ready = True
            return

        logger.info("Storage bucket %s not found, creating it", self.bucket)
        body: dict[str, object] = {"id": self.bucket, "name": self.bucket, "public": True}
        if self.file_size_limit:
            body["file_size_limit"] = self.file_size_limit
        created = await client.post(
            f"{self.endpoint}/storage/v1/bucket", json=body, headers=self._headers()
        )
        if not created.is_success:
            raise StorageError(
                f"Storage bucket {self.bucket} is unavailable ({created.status_code}): {created.text}"
            )
        self._bucket_ready = True

    async def upload(self, file_name: str, data: bytes, content_type: str) -> StoredObject:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=STORAGE_TIMEOUT_SECONDS
            ) as client:
                await self.ensure_bucket(client)
                response = await client.post(
                    f"{self.endpoint}/storage/v1/object/{self.bucket}/{file_name}",
                    content=data,
                    headers={
                        **self._headers(),
                        "Content-Type": content_type,
                        "cache-control": f"max-age={CACHE_CONTROL_SECONDS}",
                        "x-upsert": "false",
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("Supabase storage request failed: %s", exc)
            raise StorageError(f"Storage service unreachable: {exc}") from exc

        if not response.is_success:
            logger.error("Supabase upload returned %s: %s", response.status_code, response.text)
            raise StorageError(f"Upload failed with status {response.status_code}")
        return StoredObject(
            url=self.public_url(file_name), storage_path=f"{self.bucket}/{file_name}"
        )


class LocalStorage(StorageBackend):
    """Writes files below a local directory; meant for development and mock mode."""

    name = "local"

    def __init__(self, directory: str | Path, base_url: str) -> None:
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    def _write(self, file_name: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / file_name).write_bytes(data)

    async def upload(self, file_name: str, data: bytes, content_type: str) -> StoredObject:
        try:
            await asyncio.to_thread(self._write, file_name, data)
        except OSError as exc:
            logger.error("Failed to write %s to %s: %s", file_name, self.directory, exc)
            raise StorageError(f"Failed to store file locally: {exc}") from exc
        return StoredObject(url=f"{self.base_url}/{file_name}", storage_path=f"local/{file_name}")
