"""
Custom exceptions for http_transfer.

This module defines the exception hierarchy used inside the library.
The request functions in :mod:`http_transfer.transfer` translate these
into a :class:`~http_transfer.transfer.TransferResult` instead of letting
them escape.
"""

from typing import Optional


class HTTPCoreError(Exception):
    """Base exception for all http_transfer errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(HTTPCoreError):
    """
    Raised when a connection cannot be opened or breaks mid-exchange.

    ``phase`` names the step that failed: "resolve", "connect", "tls",
    "send" or "receive". It is None when the failure is not tied to I/O.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        phase: Optional[str] = None,
    ) -> None:
        super().__init__(f"Connection error: {message}", cause)
        self.phase = phase


class ProtocolError(HTTPCoreError):
    """Raised when the peer violates HTTP/1.1 or replies with nothing."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        empty_reply: bool = False,
    ) -> None:
        super().__init__(f"Protocol error: {message}", cause)
        self.empty_reply = empty_reply


class TimeoutError(HTTPCoreError):
    """Raised when an operation times out."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")
        self.timeout = timeout


class StreamError(HTTPCoreError):
    """Raised when a body sink or source fails."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        reading: bool = False,
    ) -> None:
        super().__init__(f"Stream error: {message}", cause)
        self.reading = reading


class URLError(HTTPCoreError):
    """Raised when a URL or request target cannot be built or decomposed."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        unsupported_scheme: bool = False,
    ) -> None:
        super().__init__(f"URL error: {message}", cause)
        self.unsupported_scheme = unsupported_scheme


class SessionError(HTTPCoreError):
    """Raised when a session is used before initialize() or after teardown()."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Session error: {message}", cause)
