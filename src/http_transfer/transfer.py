"""
Blocking request functions for http_transfer.

:func:`get` and :func:`post` run one request/response exchange to
completion and return a :class:`TransferResult`. They never raise for
network or protocol failures: every outcome is reported through the
result's ``code``.

- ``code == TransferCode.OK``: the exchange completed. The HTTP status
  may still be a 4xx/5xx; inspect ``status_code``.
- ``code > 0``: the exchange was attempted and failed. ``body`` holds
  whatever arrived before the failure, possibly ``b""``.
- ``code == TransferCode.LOCAL_FAILURE``: nothing was sent. ``body`` is
  None.
"""

import asyncio
import logging
import socket
import ssl
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Optional

from .exceptions import (
    ConnectionError,
    HTTPCoreError,
    ProtocolError,
    SessionError,
    StreamError,
    TimeoutError,
    URLError,
)
from .http11 import HTTP11Connection
from .http_primitives import Headers, ParsedURL, Request, build_target, parse_url
from .network.backend import NetworkBackend
from .network.stream import NetworkStream
from .session import Session
from .streams import BodyData, RequestBodySource, ResponseBuffer

logger = logging.getLogger(__name__)


GET_HEADERS: Headers = [
    (b"Accept", b"*/*"),
]

POST_HEADERS: Headers = [
    (b"Accept", b"application/json"),
    (b"Content-Type", b"application/json"),
    (b"charsets", b"utf-8"),
]


class TransferCode(IntEnum):
    """Outcome of a transfer. Negative values mean nothing was sent."""
    LOCAL_FAILURE = -1
    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    WEIRD_SERVER_REPLY = 8
    WRITE_ERROR = 23
    READ_ERROR = 26
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    GOT_NOTHING = 52
    SEND_ERROR = 55
    RECV_ERROR = 56


@dataclass(frozen=True)
class TransferResult:
    """
    Result of one request.

    Unpacks as ``(code, body)``. The caller owns ``body``.
    """

    code: TransferCode
    body: Optional[bytes] = None
    status_code: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[HTTPCoreError] = None

    @classmethod
    def local_failure(cls, error: HTTPCoreError) -> "TransferResult":
        return cls(code=TransferCode.LOCAL_FAILURE, error=error)

    @property
    def ok(self) -> bool:
        """True when the exchange completed, whatever the HTTP status."""
        return self.code == TransferCode.OK

    @property
    def is_local_failure(self) -> bool:
        return self.code < 0

    @property
    def is_success(self) -> bool:
        """True when the exchange completed with a 2xx status."""
        return self.ok and self.status_code is not None and 200 <= self.status_code < 300

    def __iter__(self) -> Iterator:
        return iter((self.code, self.body))


def classify_error(error: HTTPCoreError) -> TransferCode:
    """
    Map an exception raised during an exchange to its TransferCode.
    """
    if isinstance(error, URLError):
        if error.unsupported_scheme:
            return TransferCode.UNSUPPORTED_PROTOCOL
        return TransferCode.URL_MALFORMAT

    if isinstance(error, ConnectionError):
        return {
            "resolve": TransferCode.COULDNT_RESOLVE_HOST,
            "connect": TransferCode.COULDNT_CONNECT,
            "tls": TransferCode.SSL_CONNECT_ERROR,
            "send": TransferCode.SEND_ERROR,
        }.get(error.phase, TransferCode.RECV_ERROR)

    if isinstance(error, ProtocolError):
        if error.empty_reply:
            return TransferCode.GOT_NOTHING
        return TransferCode.WEIRD_SERVER_REPLY

    if isinstance(error, TimeoutError):
        return TransferCode.OPERATION_TIMEDOUT

    if isinstance(error, StreamError):
        if error.reading:
            return TransferCode.READ_ERROR
        return TransferCode.WRITE_ERROR

    return TransferCode.LOCAL_FAILURE


async def open_stream(
    backend: NetworkBackend,
    url: ParsedURL,
    ssl_context: ssl.SSLContext,
    timeout: Optional[float] = None,
) -> NetworkStream:
    """
    Connect to ``url`` and negotiate TLS for https.

    Raises:
        ConnectionError: With phase "resolve", "connect" or "tls"
        TimeoutError: If connecting or the handshake takes too long
    """
    try:
        stream = await backend.connect_tcp(url.host, url.port, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"Connecting to {url.host}:{url.port} timed out", timeout=timeout) from e
    except socket.gaierror as e:
        raise ConnectionError(f"Could not resolve host {url.host}: {e}", cause=e, phase="resolve") from e
    except OSError as e:
        raise ConnectionError(f"Failed to connect to {url.host}:{url.port}: {e}", cause=e, phase="connect") from e

    if not url.is_tls:
        return stream

    try:
        return await backend.connect_tls(stream, url.host, url.port, ssl_context, timeout=timeout)
    except asyncio.TimeoutError as e:
        await stream.aclose()
        raise TimeoutError(f"TLS handshake with {url.host}:{url.port} timed out", timeout=timeout) from e
    except OSError as e:
        await stream.aclose()
        raise ConnectionError(f"TLS handshake with {url.host}:{url.port} failed: {e}", cause=e, phase="tls") from e


async def _exchange(
    session: Session,
    backend: NetworkBackend,
    ssl_context: ssl.SSLContext,
    request: Request,
    sink: ResponseBuffer,
):
    stream = await open_stream(backend, request.url, ssl_context, timeout=session.connect_timeout)
    connection = HTTP11Connection(
        stream,
        read_timeout=session.read_timeout,
        write_timeout=session.write_timeout,
        write_chunk_size=session.write_chunk_size,
    )
    try:
        return await connection.handle_request(request, sink)
    finally:
        await connection.close()


def _running_in_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def perform(
    session: Session,
    method: str,
    host: str,
    port: int,
    path: str,
    body: Optional[BodyData] = None,
    headers: Optional[Headers] = None,
) -> TransferResult:
    """
    Run one blocking request/response exchange.

    Args:
        session: An initialized Session
        method: HTTP method
        host: Host name or address, optionally prefixed with ``scheme://``
        port: Port number
        path: Path, optionally with a query string; leading slashes are
            ignored
        body: Request body, or None for no body
        headers: Extra request headers

    Returns:
        TransferResult describing the outcome
    """
    try:
        backend, ssl_context = session.resources()
        if _running_in_event_loop():
            raise SessionError("Blocking request issued from inside a running event loop")
        target = build_target(host, port, path)
        source = RequestBodySource(body) if body is not None else None
    except HTTPCoreError as e:
        logger.error(f"{method} request not sent: {e.message}")
        return TransferResult.local_failure(e)
    except TypeError as e:
        error = StreamError(str(e), cause=e, reading=True)
        logger.error(f"{method} request not sent: {error.message}")
        return TransferResult.local_failure(error)
    except MemoryError as e:
        error = StreamError("Out of memory preparing request", cause=e)
        logger.error(f"{method} request not sent: {error.message}")
        return TransferResult.local_failure(error)

    sink = ResponseBuffer()

    try:
        url = parse_url(target)
        request = Request.create(method, url, headers=headers, body=source)
        if session.verbose:
            logger.info(f"> {method} {url.target} ({url.scheme}://{url.host}:{url.port})")
        response = asyncio.run(_exchange(session, backend, ssl_context, request, sink))
    except HTTPCoreError as e:
        code = classify_error(e)
        logger.error(f"{method} {target} failed ({code.name}): {e.message}")
        if code == TransferCode.LOCAL_FAILURE:
            return TransferResult.local_failure(e)
        return TransferResult(code=code, body=sink.detach(), error=e)

    if session.verbose:
        logger.info(f"< {response.status_code} {response.reason.decode('latin-1')} ({len(sink)} bytes)")

    return TransferResult(
        code=TransferCode.OK,
        body=sink.detach(),
        status_code=response.status_code,
        reason=response.reason.decode("latin-1"),
    )


def get(session: Session, host: str, port: int, path: str) -> TransferResult:
    """
    Issue a GET request and collect the response body.

    Example::

        with Session() as session:
            code, body = get(session, "localhost", 5000, "/home")
    """
    return perform(session, "GET", host, port, path, headers=GET_HEADERS)


def post(session: Session, host: str, port: int, path: str, body: BodyData) -> TransferResult:
    """
    Issue a POST request with a JSON-oriented fixed header set.

    The headers sent are always ``Accept: application/json``,
    ``Content-Type: application/json`` and ``charsets: utf-8``.
    """
    if body is None:
        error = StreamError("POST requires a body", reading=True)
        logger.error(f"POST request not sent: {error.message}")
        return TransferResult.local_failure(error)
    return perform(session, "POST", host, port, path, body=body, headers=POST_HEADERS)
