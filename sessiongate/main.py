#!/usr/bin/env python3
"""
SessionGate - Demo Service Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Installs session handling
3. Runs the API server

All session logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from sessiongate import __version__
from sessiongate.config.provider import ConfigProvider, EnvConfigProvider
from sessiongate.logging_config import configure_logging, get_logging_config
from sessiongate.modules.api import (
    HealthResponse,
    SessionView,
    SetValueRequest,
    ValueResponse,
)
from sessiongate.modules.middleware import get_session, require_session, setup_sessions
from sessiongate.modules.session import SessionRecord, StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle. The session store client is closed by the
    wrapper installed in setup_sessions().
    """
    logger.info("Starting SessionGate demo service...")
    yield
    logger.info("Shutting down SessionGate demo service...")


async def server_error_handler(request: Request, exc: Exception):
    """Handle errors that escaped the request pipeline, including failed session loads."""
    session = get_session(request)
    session_ref = f"{session.id[:8]}..." if session else "none"
    if isinstance(exc, StoreError):
        logger.error(f"Session store error (session {session_ref}): {exc}")
        return JSONResponse(status_code=503, content={"error": "Session store unavailable"})
    logger.error(f"Unhandled error (session {session_ref}): {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    provider: Optional[ConfigProvider] = None,
    redis_client=None,
) -> FastAPI:
    """
    Build the demo application.

    Args:
        provider: Configuration provider (default: environment)
        redis_client: Existing async Redis client (default: created from config)

    Returns:
        FastAPI application with sessions installed
    """
    provider = provider or EnvConfigProvider()

    app = FastAPI(
        title="SessionGate",
        description="Cookie-backed server-side sessions on Redis",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(Exception, server_error_handler)
    setup_sessions(app, provider.get_session_config(), redis_client=redis_client)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            200 with the session store status ("ok" or "unavailable")
            503: Session store client not initialized (or already closed)
        """
        client = request.app.state.session_storage.client
        if client is None:
            raise HTTPException(503, "Service not initialized")
        store = "ok"
        try:
            await client.ping()
        except RedisError as e:
            logger.warning(f"Session store ping failed: {e}")
            store = "unavailable"
        return HealthResponse(store=store)

    @app.get("/session", response_model=SessionView)
    async def read_session(session: SessionRecord = Depends(require_session)):
        """Return all values of the current session."""
        return SessionView.from_record(session)

    @app.get("/session/{name}", response_model=ValueResponse)
    async def read_value(name: str, session: SessionRecord = Depends(require_session)):
        """Return one session value, null if it is not set."""
        return ValueResponse(name=name, value=session.get(name))

    @app.put("/session/{name}", response_model=SessionView)
    async def write_value(
        name: str,
        request: SetValueRequest,
        session: SessionRecord = Depends(require_session),
    ):
        """Store a value in the session."""
        session.set(name, request.value)
        return SessionView.from_record(session)

    @app.delete("/session/{name}", response_model=SessionView)
    async def delete_value(name: str, session: SessionRecord = Depends(require_session)):
        """Remove a value from the session."""
        session.delete(name)
        return SessionView.from_record(session)

    @app.post("/session/destroy", response_model=SessionView)
    async def destroy_session(session: SessionRecord = Depends(require_session)):
        """Drop the session and rotate its id."""
        session.destroy()
        return SessionView.from_record(session)

    return app


def main():
    """Run the demo service with uvicorn."""
    server = EnvConfigProvider().get_server_config()
    configure_logging(server.log_level)
    uvicorn.run(
        "sessiongate.main:create_app",
        factory=True,
        host=server.host,
        port=server.port,
        log_level=server.log_level.lower(),
        log_config=get_logging_config(server.log_level),
    )


if __name__ == "__main__":
    main()
