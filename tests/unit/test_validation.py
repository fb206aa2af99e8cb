"""Unit tests for identifier validation."""

from __future__ import annotations

import uuid

import pytest

from newsdesk.repositories.errors import InvalidIdentifierError
from newsdesk.repositories.validation import ensure_optional_uuid, ensure_uuid, is_valid_uuid


def test_is_valid_uuid() -> None:
    assert is_valid_uuid("4e61af6d-805c-42d3-8fac-60718293a4b5")
    assert is_valid_uuid("4E61AF6D-805C-42D3-8FAC-60718293A4B5")
    assert is_valid_uuid(uuid.uuid4())

    assert not is_valid_uuid("123")
    assert not is_valid_uuid("4e61af6d805c42d38fac60718293a4b5")
    assert not is_valid_uuid(None)


def test_ensure_uuid_rejects_malformed_id() -> None:
    """Test that malformed ids fail with INVALID_UUID_FORMAT and name the field."""
    with pytest.raises(InvalidIdentifierError) as exc_info:
        ensure_uuid("123", "hot_topic_id")

    error = exc_info.value
    assert error.status_code == 400
    assert error.error_code == "INVALID_UUID_FORMAT"
    assert error.field == "hot_topic_id"
    assert error.detail == {"field": "hot_topic_id", "value": "123"}


def test_ensure_optional_uuid_treats_empty_as_absent() -> None:
    assert ensure_optional_uuid(None, "template_id") is None
    assert ensure_optional_uuid("", "template_id") is None
    value = "6f1c5a1e-3b0d-4d8e-9a57-1b2c3d4e5f60"
    assert ensure_optional_uuid(value, "template_id") == uuid.UUID(value)
