"""Session error taxonomy."""


class SessionError(Exception):
    """Base class for all session errors."""


class StoreError(SessionError):
    """The session store rejected or failed an operation."""


class StoreConnectivityError(StoreError):
    """Transport or connection failure while talking to the store."""

    def __init__(self, operation: str, key: str, message: str = ""):
        self.operation = operation
        self.key = key
        detail = f": {message}" if message else ""
        super().__init__(f"Store {operation} failed for {key}{detail}")


class DeserializationError(SessionError):
    """Stored value is not valid serialized session data."""

    def __init__(self, key: str, message: str = ""):
        self.key = key
        detail = f": {message}" if message else ""
        super().__init__(f"Cannot decode session data at {key}{detail}")


class MalformedCookieError(SessionError):
    """Session cookie value does not look like a session id."""

    def __init__(self, value: str):
        self.value = value
        super().__init__("Session cookie value is not alphanumeric")
