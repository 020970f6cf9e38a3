"""Error types raised by the Brigade REST API client.

Every error derives from :class:`BrigadeError`, so callers can catch the
whole family with a single except clause.
"""

from typing import Any


class BrigadeError(Exception):
    """Base error for all Brigade API client failures."""


class ConfigurationError(BrigadeError):
    """Raised when a client cannot be built from the given configuration."""


class TransportError(BrigadeError):
    """Raised when a request fails at the network, TLS, or timeout level.

    The originating httpx exception is available as ``__cause__``.
    """


class DecodeError(BrigadeError):
    """Raised when a successful response body cannot be decoded.

    Covers bodies that are not valid JSON as well as JSON documents that do
    not match the expected model.
    """

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body


class APIError(BrigadeError):
    """Raised when the API answers with a non-2xx status code.

    Attributes:
        status: HTTP status code of the response.
        details: Decoded error body, or an empty dict if it was not JSON.
    """

    def __init__(
        self,
        message: str,
        status: int,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} (status {self.status})"


class AuthenticationError(APIError):
    """Raised when the API rejects the credentials (401 or 403)."""


class NotFoundError(APIError):
    """Raised when the requested resource does not exist (404)."""
