from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status

from newsdesk.core.errors import ErrorResponse


@dataclass(frozen=True)
class ErrorExample:
    status_code: int
    error: str
    message: str
    description: str
    code: str | None = None
    summary: str | None = None
    detail: Any | None = None
    example_name: str | None = None


def error_responses(*examples: ErrorExample) -> dict[int | str, dict[str, Any]]:
    responses: dict[int | str, dict[str, Any]] = {}
    for example in examples:
        response: dict[str, Any] | None = responses.get(example.status_code)
        if response is None:
            examples_payload: dict[str, dict[str, Any]] = {}
            content: dict[str, dict[str, dict[str, Any]]] = {
                "application/json": {"examples": examples_payload}
            }
            response = {
                "model": ErrorResponse,
                "description": example.description,
                "content": content,
            }
            responses[example.status_code] = response
        assert response is not None

        example_name = example.example_name or example.code or example.error
        payload: dict[str, Any] = {
            "error": example.error,
            "message": example.message,
        }
        if example.code is not None:
            payload["code"] = example.code
        if example.detail is not None:
            payload["detail"] = example.detail

        example_entry: dict[str, Any] = {
            "summary": example.summary or example.description,
            "value": payload,
        }
        response_content: dict[str, dict[str, dict[str, Any]]] = response["content"]
        response_content["application/json"]["examples"][example_name] = example_entry

    return responses


def merge_responses(*groups: dict[int | str, dict[str, Any]]) -> dict[int | str, dict[str, Any]]:
    merged: dict[int | str, dict[str, Any]] = {}
    for group in groups:
        for status_code, response in group.items():
            if status_code not in merged:
                merged[status_code] = response
                continue
            target = merged[status_code]["content"]["application/json"]["examples"]
            target.update(response["content"]["application/json"]["examples"])
    return merged


def rate_limited_response(
    description: str = "Rate limit exceeded",
) -> dict[int | str, dict[str, Any]]:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="rate_limited",
            message="Too many requests",
            description=description,
            summary="Too many requests",
        )
    )


def invalid_id_response(
    description: str = "Malformed identifier",
) -> dict[int | str, dict[str, Any]]:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="bad_request",
            message="Invalid id format: '123' is not a valid UUID",
            code="INVALID_UUID_FORMAT",
            description=description,
            detail={"field": "id", "value": "123"},
        )
    )


def not_found_response(entity: str) -> dict[int | str, dict[str, Any]]:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_404_NOT_FOUND,
            error="not_found",
            message=f"{entity} 00000000-0000-0000-0000-000000000000 not found",
            code="NOT_FOUND",
            description=f"{entity} not found",
        )
    )


def validation_error_response(
    description: str = "Invalid request body",
) -> dict[int | str, dict[str, Any]]:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="validation_error",
            message="Request validation failed",
            code="VALIDATION_ERROR",
            description=description,
        )
    )


def database_error_response() -> dict[int | str, dict[str, Any]]:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="internal_error",
            message="Database is unavailable",
            code="DATABASE_UNAVAILABLE",
            description="Database unavailable or query failed",
        )
    )


def entity_responses(entity: str) -> dict[int | str, dict[str, Any]]:
    """Errors shared by every by-id route of an entity."""
    return merge_responses(
        invalid_id_response(),
        validation_error_response(),
        not_found_response(entity),
        database_error_response(),
    )
