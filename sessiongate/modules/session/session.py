import asyncio
import concurrent.futures
import json
import logging
import re
import secrets
from typing import Any, Dict, List, Optional, Union

from redis.exceptions import RedisError

from .errors import DeserializationError, MalformedCookieError, StoreConnectivityError

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"
SESSION_ID_BYTES = 16

_SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9]+")

SessionValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def generate_session_id() -> str:
    """Mint a new session id: 16 random bytes, hex encoded (32 chars)."""
    return secrets.token_hex(SESSION_ID_BYTES)


def parse_session_id(value: Optional[str]) -> Optional[str]:
    """
    Validate a session id taken from a cookie.

    Args:
        value: Raw cookie value, or None if the cookie was not sent

    Returns:
        The id, or None if no cookie was present

    Raises:
        MalformedCookieError: If the value is not alphanumeric
    """
    if value is None:
        return None
    if not _SESSION_ID_PATTERN.fullmatch(value):
        raise MalformedCookieError(value)
    return value


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def is_session_value(value: Any) -> bool:
    """Check that a value survives a JSON round trip unchanged."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return True
    if isinstance(value, list):
        return all(is_session_value(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and is_session_value(item) for key, item in value.items()
        )
    return False


class SessionRecord:
    """
    Per-request view of one client's session.

    A record is created by the session middleware for every eligible request
    and is dropped when the request completes. Reads never mark the record as
    changed; only set(), an effective delete() or destroy() do.
    """

    def __init__(
        self,
        session_id: str,
        redis_client,
        expires: int,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize session record.

        Args:
            session_id: Cookie-supplied or freshly minted session id
            redis_client: Async Redis client shared by all requests
            expires: Store TTL in seconds, refreshed on every save
            loop: Event loop that background deletions are scheduled on
                (defaults to the running loop)
        """
        self._id = session_id
        self.redis = redis_client
        self.expires = expires
        self._changed = False
        self._empty = True
        self._data: Dict[str, SessionValue] = {}
        self._pending: List[Any] = []
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        self._loop = loop

    def __repr__(self) -> str:
        return (
            f"SessionRecord(id={self._id!r}, keys={len(self._data)}, "
            f"changed={self._changed})"
        )

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    @property
    def id(self) -> str:
        return self._id

    def get_id(self) -> str:
        return self._id

    @property
    def key(self) -> str:
        return session_key(self._id)

    @property
    def changed(self) -> bool:
        return self._changed

    @property
    def empty(self) -> bool:
        return self._empty

    def get(self, name: str, default: SessionValue = None) -> SessionValue:
        if name in self._data:
            return self._data[name]
        return default

    def has(self, name: str) -> bool:
        return name in self._data

    def set(self, name: str, value: SessionValue) -> None:
        """
        Store a value in the session.

        Raises:
            TypeError: If the value cannot be stored as JSON without loss
        """
        if not is_session_value(value):
            raise TypeError(
                f"Session value for {name!r} must be JSON-safe, got {type(value).__name__}"
            )
        self._data[name] = value
        self._changed = True
        self._empty = False

    def delete(self, name: str) -> None:
        if name not in self._data:
            return
        del self._data[name]
        self._changed = True
        self._empty = not self._data

    def to_dict(self) -> Dict[str, SessionValue]:
        return dict(self._data)

    async def save(self) -> None:
        """
        Persist session data with the configured TTL.

        Raises:
            StoreConnectivityError: If Redis could not be reached
        """
        key = self.key
        try:
            await self.redis.setex(key, self.expires, json.dumps(self._data))
        except RedisError as e:
            raise StoreConnectivityError("SETEX", key, str(e)) from e

    async def load(self) -> None:
        """
        Load session data from the store.

        An unknown id leaves the record empty. Stored content that cannot be
        decoded is logged and also treated as an empty session; the next save
        overwrites it.

        Raises:
            StoreConnectivityError: If Redis could not be reached
        """
        key = self.key
        try:
            raw = await self.redis.get(key)
        except RedisError as e:
            raise StoreConnectivityError("GET", key, str(e)) from e

        if raw is None:
            return

        try:
            data = self._decode(key, raw)
        except DeserializationError as e:
            logger.warning(f"Ignoring stored session data: {e}")
            return

        self._data = data
        self._empty = not self._data

    @staticmethod
    def _decode(key: str, raw: Union[str, bytes]) -> Dict[str, SessionValue]:
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            raise DeserializationError(key, str(e)) from e
        if not isinstance(data, dict):
            raise DeserializationError(key, f"expected object, got {type(data).__name__}")
        return data

    def destroy(self) -> None:
        """
        Drop all data and rotate to a new, unsaved session id.

        The old store entry is deleted in the background; the outcome is only
        logged.
        """
        self._schedule(self._delete(self.key))
        self._data = {}
        self._changed = True
        self._empty = True
        self._id = generate_session_id()

    async def _delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
            logger.debug(f"Deleted destroyed session {key}")
        except Exception as e:
            logger.error(f"Failed to delete destroyed session {key}: {e!r}")

    def _schedule(self, coro) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or running is self._loop):
            self._pending.append(running.create_task(coro))
        elif self._loop is not None:
            # Sync handlers run in a worker thread
            self._pending.append(asyncio.run_coroutine_threadsafe(coro, self._loop))
        else:
            coro.close()
            raise RuntimeError("destroy() requires an event loop")

    async def wait_pending(self) -> None:
        """Wait for background deletions started by destroy()."""
        pending, self._pending = self._pending, []
        if not pending:
            return
        awaitables = [
            asyncio.wrap_future(f) if isinstance(f, concurrent.futures.Future) else f
            for f in pending
        ]
        results = await asyncio.gather(*awaitables, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"Background session deletion did not complete: {result!r}")
