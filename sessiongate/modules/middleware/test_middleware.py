#!/usr/bin/env python3
"""
Test script for the session middleware module.

This demonstrates the black box nature of the middleware -
its hooks can be tested independently without a running application.
"""

import json
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from fastapi import Request, Response

from sessiongate.config.provider import SessionConfig
from sessiongate.modules.filters import Always, Matches
from sessiongate.modules.middleware import SessionMiddleware, get_session


def make_request(path: str = "/", cookie: Optional[str] = None) -> Request:
    """Build a bare request for the given path and session cookie."""
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"session={cookie}".encode()))
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "root_path": "",
        "path": path,
        "query_string": b"",
        "headers": headers,
    })


@pytest.fixture
def redis_client():
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    return redis


@pytest.fixture
def middleware(redis_client):
    return SessionMiddleware(redis_client, SessionConfig())


def test_is_enabled(middleware):
    assert middleware.is_enabled("/") is True
    assert middleware.is_enabled("/account/settings") is True
    assert middleware.is_enabled("/static/site.css") is False
    assert middleware.is_enabled("/img/logo.svg") is False


def test_is_enabled_needs_both_filters(redis_client):
    middleware = SessionMiddleware(
        redis_client, SessionConfig(enable=Matches(r"^/app"), disable=Always(False))
    )

    assert middleware.is_enabled("/app/logo.png") is True
    assert middleware.is_enabled("/home") is False


def test_read_session_id(middleware):
    assert middleware.read_session_id(make_request(cookie="abc123")) == "abc123"
    assert middleware.read_session_id(make_request(cookie="abc-123")) is None
    assert middleware.read_session_id(make_request()) is None


@pytest.mark.asyncio
async def test_before_request_new_session(middleware, redis_client):
    request = make_request("/page")

    session = await middleware.before_request(request)

    assert session is get_session(request)
    assert len(session.id) == 32
    redis_client.get.assert_not_called()


@pytest.mark.asyncio
async def test_before_request_loads_existing_session(middleware, redis_client):
    redis_client.get.return_value = json.dumps({"user": "alice"})
    request = make_request("/page", cookie="abc123")

    session = await middleware.before_request(request)

    redis_client.get.assert_called_once_with("session:abc123")
    assert session.id == "abc123"
    assert session.get("user") == "alice"
    assert session.changed is False


@pytest.mark.asyncio
async def test_before_request_skips_filtered_paths(middleware, redis_client):
    request = make_request("/static/app.js", cookie="abc123")

    assert await middleware.before_request(request) is None
    assert get_session(request) is None
    redis_client.get.assert_not_called()


@pytest.mark.asyncio
async def test_after_request_unchanged_session(middleware, redis_client):
    request = make_request("/page")
    session = await middleware.before_request(request)
    response = Response("ok")

    middleware.after_request(request, response, session)

    assert "set-cookie" not in response.headers
    assert response.background is None


@pytest.mark.asyncio
async def test_after_request_new_session(middleware, redis_client):
    request = make_request("/page")
    session = await middleware.before_request(request)
    session.set("foo", "bar")
    response = Response("ok")

    middleware.after_request(request, response, session)

    assert response.headers["set-cookie"].startswith(f"session={session.id};")
    redis_client.setex.assert_not_called()

    # The save runs after the response has been sent
    await response.background()
    redis_client.setex.assert_called_once_with(
        f"session:{session.id}", 86400, json.dumps({"foo": "bar"})
    )


@pytest.mark.asyncio
async def test_after_request_without_session(middleware):
    response = Response("ok")

    middleware.after_request(make_request("/logo.png"), response, None)

    assert "set-cookie" not in response.headers
