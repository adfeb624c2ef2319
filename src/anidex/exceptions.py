"""Exception hierarchy and error taxonomy for anidex.

All exceptions inherit from :class:`AnidexError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`anidex.exit_codes`.
The top-level error handler in :func:`anidex.app.main` catches
``AnidexError`` and exits with the appropriate code.

Failures of the request pipeline form a closed taxonomy described by
:class:`ErrorKind`. Every :class:`RequestError` subclass maps to exactly one
kind, so callers can switch on ``exc.kind`` instead of ``isinstance`` chains.

Subclass hierarchy::

    AnidexError (exit 1)
    +-- RequestError
    |   +-- InvalidEndpointError   (exit 2)   ErrorKind.INVALID_ENDPOINT
    |   +-- NetworkError           (exit 6)   ErrorKind.NETWORK
    |   +-- DecodingError          (exit 8)   ErrorKind.DECODING
    |   +-- UnexpectedStatusError  (exit 5)   ErrorKind.UNEXPECTED_STATUS
    |   +-- RateLimitedError       (exit 7)   ErrorKind.RATE_LIMITED
    +-- AssetNotFoundError         (exit 4)
    +-- FavoritesStoreError        (exit 10)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

import enum
from typing import Optional

from anidex.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_DECODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_SERVER_ERROR,
    EXIT_STORE_ERROR,
)


class ErrorKind(str, enum.Enum):
    """Closed set of failure categories produced by the request pipeline."""

    INVALID_ENDPOINT = "invalid_endpoint"
    NETWORK = "network"
    DECODING = "decoding"
    UNEXPECTED_STATUS = "unexpected_status"
    RATE_LIMITED = "rate_limited"


class AnidexError(Exception):
    """Base exception for all anidex errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class RequestError(AnidexError):
    """A classified failure of one pipeline call.

    Attributes:
        kind: The :class:`ErrorKind` this failure belongs to.
        cause: The underlying exception, when there is one.
    """

    kind: ErrorKind

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def user_message(self) -> str:
        """Text suitable for display next to a list or detail view."""
        return str(self)


class InvalidEndpointError(RequestError):
    """Raised when the base address plus path does not form a usable URL."""

    kind = ErrorKind.INVALID_ENDPOINT
    exit_code = EXIT_INVALID_USAGE

    @property
    def user_message(self) -> str:
        return "Invalid URL"


class NetworkError(RequestError):
    """Raised on transport failures: timeouts, DNS, refused connections."""

    kind = ErrorKind.NETWORK
    exit_code = EXIT_CONNECTION_ERROR

    @property
    def user_message(self) -> str:
        return f"Network error: {self.cause or self}"


class DecodingError(RequestError):
    """Raised when a well-formed HTTP response does not match the target shape."""

    kind = ErrorKind.DECODING
    exit_code = EXIT_DECODING_ERROR

    @property
    def user_message(self) -> str:
        return f"Failed to decode response: {self.cause or self}"


class UnexpectedStatusError(RequestError):
    """Raised when the API answers with a status outside ``200..299``."""

    kind = ErrorKind.UNEXPECTED_STATUS
    exit_code = EXIT_SERVER_ERROR

    def __init__(self, status_code: int, message: str | None = None):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return "Invalid response from server"


class RateLimitedError(RequestError):
    """Raised when the API answers HTTP 429."""

    kind = ErrorKind.RATE_LIMITED
    exit_code = EXIT_RATE_LIMITED

    @property
    def user_message(self) -> str:
        return "Rate limit exceeded. Please wait a moment."


class AssetNotFoundError(AnidexError):
    """Raised when an asset is in neither cache tier and cannot be downloaded."""

    exit_code = EXIT_NOT_FOUND


class FavoritesStoreError(AnidexError):
    """Raised when the favorites store cannot be opened at startup."""

    exit_code = EXIT_STORE_ERROR


class ConfigError(AnidexError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


_EXIT_CODES_BY_KIND = {
    cls.kind: cls.exit_code
    for cls in (
        InvalidEndpointError,
        NetworkError,
        DecodingError,
        UnexpectedStatusError,
        RateLimitedError,
    )
}


def exit_code_for(kind: Optional[ErrorKind]) -> int:
    """Exit code for a failure recorded only by its :class:`ErrorKind`."""
    if kind is None:
        return EXIT_GENERIC_FAILURE
    return _EXIT_CODES_BY_KIND.get(kind, EXIT_GENERIC_FAILURE)
