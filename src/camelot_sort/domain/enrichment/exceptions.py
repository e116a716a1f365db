"""Exceptions raised by key/tempo resolvers.

All of them are recoverable: the affected track simply stays unresolved.
"""

from typing import Any, Optional


class LookupFailure(Exception):
    """Base exception for external lookup failures."""

    pass


class LookupUnavailable(LookupFailure):
    """Raised on a non-success status, transport error or timeout."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NoResultFound(LookupFailure):
    """Raised when the service explicitly reports no match."""

    pass


class MalformedLookupPayload(LookupFailure):
    """Raised when the response does not have the expected shape."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        excerpt = repr(payload)
        if len(excerpt) > 200:
            excerpt = excerpt[:200] + "..."
        super().__init__(f"{message} (payload: {excerpt})")
