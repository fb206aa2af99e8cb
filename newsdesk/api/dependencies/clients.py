"""Dependencies for the outbound clients: LLM, Dify and file storage."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

from fastapi import Request

from newsdesk.core.config import Settings
from newsdesk.db.connection import ConnectionManager
from newsdesk.dify.client import DifyClient
from newsdesk.llm.client import LLMClient, build_llm_client
from newsdesk.services.image_upload_service import MAX_IMAGE_SIZE
from newsdesk.services.storage import LocalStorage, StorageBackend, SupabaseStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_llm_client_factory(request: Request) -> Callable[[], LLMClient]:
    """The client is built on first use, so requests that fail validation never need a key."""
    return partial(build_llm_client, get_settings(request))


def get_dify_client(request: Request) -> DifyClient:
    """Dify client shared across requests so its GET cache is too."""
    return request.app.state.dify_client


def get_storage_backends(request: Request) -> tuple[StorageBackend, StorageBackend | None]:
    """Primary storage backend and its fallback.

    Supabase Storage is primary whenever the project is configured and the
    database is not in mock mode; local disk is the fallback (or the only
    backend otherwise).
    """
    app_settings = get_settings(request)
    local = LocalStorage(app_settings.local_upload_dir, app_settings.local_upload_base_url)
    connections: ConnectionManager = request.app.state.connections
    config = connections.factory.config
    if config.use_mock_mode or not config.endpoint or not config.api_key:
        return local, None
    supabase = SupabaseStorage(
        config.endpoint,
        config.api_key,
        app_settings.storage_bucket,
        file_size_limit=MAX_IMAGE_SIZE,
    )
    return supabase, local
