from __future__ import annotations

import re
import uuid
from typing import Final

from newsdesk.repositories.errors import InvalidIdentifierError

UUID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_uuid(value: object) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    return isinstance(value, str) and UUID_PATTERN.match(value) is not None


def ensure_uuid(value: str | uuid.UUID, field: str = "id") -> uuid.UUID:
    """Parse a canonical hyphenated UUID, rejecting anything else before it reaches the database."""
    if isinstance(value, uuid.UUID):
        return value
    if not is_valid_uuid(value):
        raise InvalidIdentifierError(field, value)
    return uuid.UUID(value)


def ensure_optional_uuid(value: str | uuid.UUID | None, field: str) -> uuid.UUID | None:
    if value is None or value == "":
        return None
    return ensure_uuid(value, field)
