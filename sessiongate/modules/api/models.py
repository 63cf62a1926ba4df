"""
SessionGate shared data models.

These models define the structure of the data returned by the
session endpoints of the demo service.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from sessiongate.modules.session import SessionRecord
from sessiongate.modules.session.session import is_session_value

# Request Models (API Input)


class SetValueRequest(BaseModel):
    """Request to store a value in the session."""

    value: Any = Field(..., description="JSON value to store under the given name")

    @field_validator("value")
    @classmethod
    def validate_value(cls, v):
        """Only accept values that survive a JSON round trip."""
        if not is_session_value(v):
            raise ValueError("Session values must be JSON-safe")
        return v


# Response Models (API Output)


class SessionView(BaseModel):
    """Current state of the request's session."""

    session_id: str = Field(..., description="Current session identifier")
    data: Dict[str, Any] = Field(default_factory=dict, description="Session values")
    changed: bool = Field(default=False, description="Modified during this request")
    empty: bool = Field(default=True, description="Session holds no values")

    @classmethod
    def from_record(cls, session: SessionRecord) -> "SessionView":
        return cls(
            session_id=session.id,
            data=session.to_dict(),
            changed=session.changed,
            empty=session.empty,
        )


class ValueResponse(BaseModel):
    """A single session value."""

    name: str
    value: Any = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="ok")
    store: Optional[str] = Field(default=None, description="Session store status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
