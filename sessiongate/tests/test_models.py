"""
Unit tests for SessionGate data models.
"""

from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from sessiongate.modules.api.models import (
    HealthResponse,
    SessionView,
    SetValueRequest,
    ValueResponse,
)
from sessiongate.modules.session import SessionRecord


class TestSetValueRequest:
    """Test set value request model."""

    @pytest.mark.parametrize(
        "value",
        ["bar", 42, 1.5, True, None, [1, "two", None], {"nested": {"list": [1, 2]}}],
    )
    def test_valid_values(self, value):
        assert SetValueRequest(value=value).value == value

    def test_value_required(self):
        with pytest.raises(ValidationError):
            SetValueRequest()


class TestSessionView:
    """Test session view model."""

    def test_from_record(self):
        session = SessionRecord("abc123", AsyncMock(), 60)
        session.set("foo", "bar")

        view = SessionView.from_record(session)

        assert view.session_id == "abc123"
        assert view.data == {"foo": "bar"}
        assert view.changed is True
        assert view.empty is False

    def test_data_is_a_copy(self):
        session = SessionRecord("abc123", AsyncMock(), 60)
        view = SessionView.from_record(session)

        view.data["foo"] = "bar"

        assert session.has("foo") is False


def test_value_response_defaults():
    assert ValueResponse(name="foo").value is None


def test_health_response_defaults():
    health = HealthResponse()

    assert health.status == "ok"
    assert health.store is None
    assert health.timestamp.tzinfo is not None
