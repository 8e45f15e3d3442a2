"""
HTTP/1.1 exchange driver for http_transfer.

This module implements the HTTP11Connection class that runs a single
request/response exchange over a NetworkStream using h11. The request
body is pulled from a ByteSource and the response body is pushed into a
ByteSink as it arrives.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, Optional

import h11

from .exceptions import (
    ConnectionError,
    ProtocolError,
    StreamError,
    TimeoutError,
    URLError,
)
from .http_primitives import Request, Response
from .network.stream import NetworkStream
from .streams import ByteSink

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 connection."""
    NEW = "new"           # Connection created, not yet used
    ACTIVE = "active"     # Exchange in progress
    DONE = "done"         # Exchange completed
    CLOSED = "closed"     # Exchange failed or connection closed early


class HTTP11Connection:
    """
    Single-use HTTP/1.1 connection.

    Each instance drives exactly one exchange and closes its stream
    afterwards. There is no keep-alive and no reuse.
    """

    # Default configuration
    DEFAULT_READ_TIMEOUT: Optional[float] = None   # wait indefinitely
    DEFAULT_WRITE_TIMEOUT: Optional[float] = None  # wait indefinitely
    DEFAULT_READ_SIZE = 65536
    DEFAULT_WRITE_CHUNK_SIZE = 16384

    def __init__(
        self,
        stream: NetworkStream,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        write_chunk_size: Optional[int] = None,
    ):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            read_timeout: Timeout for each read in seconds, None for no limit
            write_timeout: Timeout for each write in seconds, None for no limit
            write_chunk_size: Largest piece pulled from the body source at once
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW

        self._read_timeout = read_timeout if read_timeout is not None else self.DEFAULT_READ_TIMEOUT
        self._write_timeout = write_timeout if write_timeout is not None else self.DEFAULT_WRITE_TIMEOUT
        self._write_chunk_size = write_chunk_size or self.DEFAULT_WRITE_CHUNK_SIZE

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0
        self._body_bytes_received = 0
        self._duration: Optional[float] = None

        logger.debug("HTTP/1.1 connection initialized")

    async def handle_request(self, request: Request, sink: ByteSink) -> Response:
        """
        Run one complete request/response exchange.

        Args:
            request: The HTTP request to send
            sink: Receives every chunk of the response body, in order

        Returns:
            The response head. The body is in ``sink``.

        Raises:
            ConnectionError: If the connection was already used or breaks
            ProtocolError: If the server reply violates HTTP/1.1
            TimeoutError: If a read or write exceeds its timeout
            StreamError: If the body source or the sink fails
            URLError: If the request cannot be expressed on the wire
        """
        if self._state != ConnectionState.NEW:
            raise ConnectionError(f"Connection is {self._state.value}, cannot start an exchange")

        self._state = ConnectionState.ACTIVE
        start_time = time.monotonic()

        try:
            await self._send_request(request)
            response = await self._receive_response()
            await self._receive_body(sink)
        except Exception:
            self._state = ConnectionState.CLOSED
            raise
        else:
            self._state = ConnectionState.DONE
        finally:
            self._duration = time.monotonic() - start_time
            await self.close()

        logger.debug(
            f"{request.method.decode()} {request.url.target} on {self._stream.peer} -> "
            f"{response.status_code} ({self._body_bytes_received} bytes, "
            f"{self._duration:.3f}s)"
        )

        return response

    async def _send_request(self, request: Request) -> None:
        """
        Send the request head, the body (if any) and the end of message.
        """
        headers = list(request.headers)
        if request.body is not None:
            headers.append((b"Content-Length", str(request.body.total).encode()))

        try:
            h11_request = h11.Request(
                method=request.method,
                target=request.target,
                headers=headers,
            )
        except h11.LocalProtocolError as e:
            raise URLError(f"Cannot send request: {e}", cause=e) from e

        await self._send_event(h11_request)

        if request.body is not None:
            while True:
                try:
                    chunk = request.body.read(self._write_chunk_size)
                except Exception as e:
                    raise StreamError(
                        f"Error reading request body: {e}", cause=e, reading=True
                    ) from e
                if not chunk:
                    break
                await self._send_event(h11.Data(data=chunk))

        await self._send_event(h11.EndOfMessage())

    async def _send_event(self, event: h11.Event) -> None:
        """
        Serialize an h11 event and write it to the network stream.
        """
        try:
            data = self._h11_connection.send(event)
        except h11.LocalProtocolError as e:
            raise ProtocolError(f"Cannot serialize request: {e}", cause=e) from e

        if not data:
            return

        try:
            await asyncio.wait_for(self._stream.write(data), timeout=self._write_timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError("Write timed out", timeout=self._write_timeout) from e
        except (OSError, RuntimeError) as e:
            raise ConnectionError(f"Failed to send data: {e}", cause=e, phase="send") from e

        self._bytes_sent += len(data)

    async def _read_into_parser(self) -> None:
        """
        Feed the next piece of network data to h11.
        """
        try:
            data = await asyncio.wait_for(
                self._stream.read(self.DEFAULT_READ_SIZE),
                timeout=self._read_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TimeoutError("Read timed out", timeout=self._read_timeout) from e
        except (OSError, RuntimeError) as e:
            raise ConnectionError(f"Failed to receive data: {e}", cause=e, phase="receive") from e

        if not data and self._bytes_received == 0:
            raise ProtocolError("Empty reply from server", empty_reply=True)

        self._bytes_received += len(data)
        # An empty read tells h11 the peer closed its side.
        self._h11_connection.receive_data(data)

    def _next_event(self) -> Any:
        try:
            return self._h11_connection.next_event()
        except h11.RemoteProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e

    async def _receive_response(self) -> Response:
        """
        Read events until the final (non-1xx) response head arrives.
        """
        while True:
            event = self._next_event()

            if event is h11.NEED_DATA:
                await self._read_into_parser()
                continue

            if isinstance(event, h11.InformationalResponse):
                continue

            if isinstance(event, h11.Response):
                return Response(
                    status_code=event.status_code,
                    reason=bytes(event.reason),
                    headers=[(bytes(name), bytes(value)) for name, value in event.headers],
                    http_version=bytes(event.http_version),
                )

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")

    async def _receive_body(self, sink: ByteSink) -> None:
        """
        Push response body chunks into ``sink`` until the message ends.
        """
        while True:
            event = self._next_event()

            if event is h11.NEED_DATA:
                await self._read_into_parser()
                continue

            if isinstance(event, h11.Data):
                consumed = sink.append(event.data)
                if consumed != len(event.data):
                    raise StreamError(
                        f"Sink consumed {consumed} of {len(event.data)} bytes"
                    )
                self._body_bytes_received += consumed
                continue

            if isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                return

    async def close(self) -> None:
        """
        Close the underlying stream. Safe to call more than once.
        """
        if self._state == ConnectionState.ACTIVE:
            self._state = ConnectionState.CLOSED
        if not self._stream.is_closed:
            await self._stream.aclose()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._stream.is_closed

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get connection metrics.

        Returns:
            Dictionary with byte counters, duration and state
        """
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "body_bytes_received": self._body_bytes_received,
            "duration": self._duration,
            "state": self._state.value,
        }
