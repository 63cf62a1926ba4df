"""
Shared pytest fixtures for SessionGate tests.

This module provides common fixtures including:
- Redis mocks for session/middleware tests
- In-memory Redis mock for request round trips
- FastAPI application factory with sessions installed
"""

import os
import sys
from typing import Callable, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessiongate.config.provider import SessionConfig
from sessiongate.modules.middleware import setup_sessions


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()

    redis.setex = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()

    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes. The
    operations are AsyncMocks wrapping the storage, so calls can
    still be asserted.
    """
    storage = {}
    ttls = {}

    async def mock_setex(key, ttl, value):
        storage[key] = value
        ttls[key] = ttl
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                ttls.pop(key, None)
                count += 1
        return count

    redis = AsyncMock()
    redis.setex = AsyncMock(side_effect=mock_setex)
    redis.get = AsyncMock(side_effect=mock_get)
    redis.delete = AsyncMock(side_effect=mock_delete)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    redis._storage = storage  # Expose for test assertions
    redis._ttls = ttls

    return redis


# =============================================================================
# Application Factory
# =============================================================================

@pytest.fixture
def make_app(mock_redis_with_data) -> Callable[..., FastAPI]:
    """
    Factory for FastAPI apps with sessions installed on the in-memory Redis.

    Usage:
        def test_something(make_app):
            app = make_app(cookie_expires=60)

            @app.get("/page")
            def page(session=Depends(get_session)):
                ...
    """
    def factory(redis_client: Optional[AsyncMock] = None, **options) -> FastAPI:
        app = FastAPI()
        config = SessionConfig(**options)
        setup_sessions(app, config, redis_client=redis_client or mock_redis_with_data)
        return app

    return factory


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests requiring a running Redis server"
    )
