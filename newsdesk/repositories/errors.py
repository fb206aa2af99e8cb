"""Errors raised by the repositories, each carrying its HTTP status and error code."""

from __future__ import annotations

from typing import Any

from starlette import status

from newsdesk.core.errors import ServiceError


class RepositoryError(ServiceError):
    """Base error for repository failures."""


class InvalidIdentifierError(RepositoryError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            f"Invalid {field} format: '{value}' is not a valid UUID",
            "INVALID_UUID_FORMAT",
            {"field": field, "value": str(value)},
        )
        self.field = field


class InvalidPayloadError(RepositoryError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, detail: Any | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", detail)


class InvalidStatusTransitionError(RepositoryError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{target}'",
            "INVALID_STATUS_TRANSITION",
            {"current": current, "target": target},
        )


class EntityNotFoundError(RepositoryError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity} {entity_id} not found",
            "NOT_FOUND",
            {"entity": entity, "id": str(entity_id)},
        )
        self.entity = entity


class ReferenceNotFoundError(RepositoryError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"Referenced {entity} {entity_id} does not exist",
            "REFERENCE_NOT_FOUND",
            {"field": field, "id": str(entity_id)},
        )
        self.field = field


class DatabaseUnavailableError(RepositoryError):
    def __init__(self, message: str = "Database is unavailable") -> None:
        super().__init__(message, "DATABASE_UNAVAILABLE")


class DatabaseOperationError(RepositoryError):
    def __init__(self, message: str, db_code: str | None = None) -> None:
        super().__init__(message, "DATABASE_ERROR", {"db_code": db_code} if db_code else None)
        self.db_code = db_code
