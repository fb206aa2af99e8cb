"""Request identifiers: generation, propagation and the HTTP middleware."""

from __future__ import annotations

import secrets
import string
import time
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import Final

from fastapi import Request, Response

REQUEST_ID_HEADER: Final[str] = "x-request-id"
DB_REQUEST_ID_HEADER: Final[str] = "x-db-request-id"
NO_STORE_CACHE_CONTROL: Final[str] = "no-store, max-age=0"

_REQUEST_ID_ALPHABET = string.ascii_lowercase + string.digits

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Return an id of the form ``req-<epoch ms>-<7 base36 chars>``."""
    suffix = "".join(secrets.choice(_REQUEST_ID_ALPHABET) for _ in range(7))
    return f"req-{int(time.time() * 1000)}-{suffix}"


def get_request_id() -> str | None:
    return request_id_var.get()


async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Assign a request id, expose it downstream and disable caching of API responses."""
    request_id = (
        request.headers.get(REQUEST_ID_HEADER)
        or request.headers.get(DB_REQUEST_ID_HEADER)
        or generate_request_id()
    )
    request.state.request_id = request_id
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)

    response.headers[REQUEST_ID_HEADER] = request_id
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = NO_STORE_CACHE_CONTROL
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
    return response
