"""
API Module - Black Box Interface

Purpose: Data models for the session endpoints
Interface: SetValueRequest, SessionView, ValueResponse, HealthResponse
Hidden: Validation rules

The API module only describes data - it contains no session logic.
"""

from .models import HealthResponse, SessionView, SetValueRequest, ValueResponse

__all__ = [
    "SetValueRequest",
    "SessionView",
    "ValueResponse",
    "HealthResponse",
]
