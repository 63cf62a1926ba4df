"""
Session Middleware Module - Black Box Interface

Purpose: Give every eligible request a session backed by a cookie and Redis
Interface: SessionMiddleware, setup_sessions(), get_session(), require_session()
Hidden: Cookie negotiation, id rotation, load/save ordering

Can be used by any FastAPI app or sub-app that needs per-client state.
Completely independent and replaceable.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response
from starlette.background import BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware

from sessiongate.config.provider import EnvConfigProvider, SessionConfig
from sessiongate.modules.filters import match
from sessiongate.modules.session import (
    MalformedCookieError,
    SessionRecord,
    StoreError,
    generate_session_id,
    parse_session_id,
)
from sessiongate.modules.storage import StorageModule

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "session"


class SessionMiddleware:
    """
    Cookie-backed session middleware for FastAPI applications.

    Before the handler runs, the request gets a SessionRecord in
    request.state.session (unless its path is filtered out). Once the handler
    produced a response, changed sessions get their cookie updated and are
    saved after the response has been sent.
    """

    def __init__(self, redis_client, config: Optional[SessionConfig] = None):
        """
        Initialize session middleware.

        Args:
            redis_client: Async Redis client shared by all requests
            config: Session configuration (default: SessionConfig())
        """
        self.redis = redis_client
        self.config = config or SessionConfig()

    def is_enabled(self, path: str) -> bool:
        """Check if sessions are enabled (whitelisted and not blacklisted) for a path."""
        return match(self.config.enable, path) and not match(self.config.disable, path)

    def read_session_id(self, request: Request) -> Optional[str]:
        """Read the session id cookie; malformed values count as absent."""
        try:
            return parse_session_id(request.cookies.get(self.config.cookie_name))
        except MalformedCookieError:
            logger.debug(f"Ignoring malformed session cookie on {request.url.path}")
            return None

    async def before_request(self, request: Request) -> Optional[SessionRecord]:
        """
        Resolve, attach and load the session for a request.

        Returns:
            The attached record, or None if the path is filtered out

        Raises:
            StoreConnectivityError: If an existing session could not be loaded.
                The record stays attached so error handlers can still see it.
        """
        if not self.is_enabled(request.url.path):
            return None

        session_id = self.read_session_id(request)
        exists = session_id is not None
        if not exists:
            session_id = generate_session_id()

        session = SessionRecord(session_id, self.redis, self.config.session_expires)
        setattr(request.state, SESSION_STATE_KEY, session)

        if exists:
            await session.load()
        return session

    def set_cookie(self, request: Request, response: Response, session: SessionRecord) -> None:
        """Write the session cookie if the browser does not hold the current id."""
        if self.read_session_id(request) == session.id:
            return

        expires = None
        if session.empty:
            value = ""
        else:
            if self.config.cookie_expires:
                expires = datetime.now(timezone.utc) + timedelta(
                    seconds=self.config.cookie_expires
                )
            value = session.id

        response.set_cookie(
            self.config.cookie_name,
            value,
            expires=expires,
            path="/",
            httponly=self.config.cookie_httponly,
            secure=self.config.cookie_secure,
            samesite=self.config.cookie_samesite,
        )

    async def persist(self, session: SessionRecord) -> None:
        """Save a session; failures are logged because the client cannot retry."""
        await session.wait_pending()
        try:
            await session.save()
        except StoreError as e:
            logger.error(f"Failed to save session {session.id[:8]}...: {e}")

    def after_request(
        self, request: Request, response: Response, session: Optional[SessionRecord]
    ) -> None:
        """Update the cookie and schedule the save for a changed session."""
        if session is None or not session.changed:
            return

        self.set_cookie(request, response, session)

        tasks = BackgroundTasks()
        if response.background is not None:
            tasks.add_task(response.background)
        tasks.add_task(self.persist, session)
        response.background = tasks

    async def __call__(self, request: Request, call_next):
        """Process the request through the session middleware."""
        session = await self.before_request(request)
        if session is None:
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            # The host builds the error response outside this middleware,
            # so only the data can be kept.
            if session.changed:
                logger.warning(
                    f"Unhandled error on {request.url.path}, saving session without cookie"
                )
                await self.persist(session)
            raise

        self.after_request(request, response, session)
        return response


def get_session(request: Request) -> Optional[SessionRecord]:
    """FastAPI dependency returning the request's session, if any."""
    return getattr(request.state, SESSION_STATE_KEY, None)


def require_session(request: Request) -> SessionRecord:
    """FastAPI dependency for endpoints that cannot work without a session."""
    session = get_session(request)
    if session is None:
        raise HTTPException(500, "Sessions are not enabled for this path")
    return session


def setup_sessions(
    app: FastAPI,
    config: Optional[SessionConfig] = None,
    redis_client=None,
) -> SessionMiddleware:
    """
    Install session handling on a FastAPI application.

    Args:
        app: Application to install the middleware on (before startup)
        config: Session configuration (default: read from environment)
        redis_client: Existing async Redis client (default: created from
            config.database)

    Returns:
        The installed SessionMiddleware

    The Redis client is closed when the application shuts down.
    """
    config = config or EnvConfigProvider().get_session_config()
    storage = StorageModule(config.database, client=redis_client)
    middleware = SessionMiddleware(storage.connect(), config)

    app.add_middleware(BaseHTTPMiddleware, dispatch=middleware)
    app.state.session_storage = storage
    app.state.session_middleware = middleware

    # Wrap the lifespan to close the Redis client as well
    lifespan_context = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(lifespan_app):
        try:
            async with lifespan_context(lifespan_app) as state:
                yield state
        finally:
            await storage.disconnect()

    app.router.lifespan_context = lifespan
    return middleware


# Module interface - what this module provides
__all__ = [
    "SessionMiddleware",
    "SESSION_STATE_KEY",
    "get_session",
    "require_session",
    "setup_sessions",
]
