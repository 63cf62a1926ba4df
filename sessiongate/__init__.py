"""
SessionGate - Cookie-backed server-side sessions

Keeps per-client state in Redis and ties it to the browser with a cookie.

Modules:
- session: Session record, load/save/destroy against the store
- middleware: Request lifecycle, cookie negotiation, FastAPI wiring
- filters: Which paths get a session
- storage: Redis client lifecycle
- api: Data models for the demo service
"""

from sessiongate.modules.middleware import (
    SessionMiddleware,
    get_session,
    require_session,
    setup_sessions,
)
from sessiongate.modules.session import SessionRecord

__version__ = "1.0.0"

__all__ = [
    "SessionMiddleware",
    "SessionRecord",
    "get_session",
    "require_session",
    "setup_sessions",
]
