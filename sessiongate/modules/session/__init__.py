"""
Session Module - Black Box Interface

Purpose: Hold one client's session data for the duration of a request
Interface: SessionRecord.get/set/delete/destroy, load(), save()
Hidden: Redis key layout, serialization, background deletion

Replaceable with any backend that offers SETEX/GET/DEL semantics.
"""

from .errors import (
    DeserializationError,
    MalformedCookieError,
    SessionError,
    StoreConnectivityError,
    StoreError,
)
from .session import (
    SessionRecord,
    SessionValue,
    generate_session_id,
    parse_session_id,
    session_key,
)

__all__ = [
    "SessionRecord",
    "SessionValue",
    "generate_session_id",
    "parse_session_id",
    "session_key",
    "SessionError",
    "StoreError",
    "StoreConnectivityError",
    "DeserializationError",
    "MalformedCookieError",
]
