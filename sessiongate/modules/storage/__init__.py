"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection shared by all requests
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling, response decoding

Can be replaced with any storage backend offering SETEX/GET/DEL.
"""

import logging
import os
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize storage with connection URL.

        Args:
            connection_url: Redis URL (default: REDIS_URL or local Redis)
            client: Already constructed client to use instead of creating one
        """
        self.url = connection_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self._client = client

    @property
    def client(self) -> Optional[redis.Redis]:
        return self._client

    def connect(self) -> redis.Redis:
        """Get storage connection, creating the client on first use."""
        if not self._client:
            # Connections are opened lazily by the pool
            self._client = redis.from_url(self.url, decode_responses=True)
            logger.info("Session store client created")
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Session store client closed")


__all__ = ["StorageModule"]
