"""
http_transfer - Minimal blocking HTTP client helper

Issue one GET or POST to a host/port/path, collect the response body
into a growable buffer, and decompose URLs into host/port/path/query.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

from typing import Any

# Import main components for easy access
from .exceptions import (
    HTTPCoreError,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    StreamError,
    URLError,
    SessionError,
)
from .http_primitives import ParsedURL, Request, Response, build_target, parse_url
from .session import Session
from .streams import ByteSink, ByteSource, RequestBodySource, ResponseBuffer
from .transfer import TransferCode, TransferResult, get, perform, post


def initialize(**config: Any) -> Session:
    """
    Create and initialize a Session.

    Keyword arguments are passed to :class:`Session`.
    """
    return Session(**config).initialize()


def teardown(session: Session) -> None:
    """Tear down a Session created by :func:`initialize`."""
    session.teardown()


__all__ = [
    "initialize",
    "teardown",
    "get",
    "post",
    "perform",
    "parse_url",
    "build_target",
    "Session",
    "ParsedURL",
    "Request",
    "Response",
    "TransferCode",
    "TransferResult",
    "ByteSink",
    "ByteSource",
    "RequestBodySource",
    "ResponseBuffer",
    "HTTPCoreError",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
    "StreamError",
    "URLError",
    "SessionError",
]
