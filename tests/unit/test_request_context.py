"""Unit tests for request ids and the error payload helpers."""

from __future__ import annotations

import json
import re

from fastapi import Request

from newsdesk.core.errors import ServiceError, service_exception_handler
from newsdesk.core.request_context import generate_request_id
from newsdesk.repositories.errors import EntityNotFoundError


def _request() -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": []})


def test_generate_request_id_format() -> None:
    request_id = generate_request_id()

    assert re.fullmatch(r"req-\d{13}-[a-z0-9]{7}", request_id)
    assert generate_request_id() != request_id


def test_service_error_payload() -> None:
    response = service_exception_handler(_request(), EntityNotFoundError("Article", "abc"))

    assert response.status_code == 404
    assert json.loads(response.body) == {
        "error": "not_found",
        "message": "Article abc not found",
        "code": "NOT_FOUND",
        "detail": {"entity": "Article", "id": "abc"},
    }


def test_service_error_defaults_to_server_error() -> None:
    response = service_exception_handler(_request(), ServiceError("boom", "SOMETHING_BROKE"))

    assert response.status_code == 500
    assert json.loads(response.body)["code"] == "SOMETHING_BROKE"
