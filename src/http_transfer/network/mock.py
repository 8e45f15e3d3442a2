"""
Mock network implementations for testing.

This module provides in-memory NetworkStream and NetworkBackend
implementations so exchanges can be driven without real sockets.
"""

import ssl
from typing import Any, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    Reads are served from a scripted byte string, at most ``chunk_size``
    bytes at a time, and every write is captured.
    """

    def __init__(
        self,
        data: bytes = b"",
        chunk_size: Optional[int] = None,
        read_error: Optional[BaseException] = None,
        write_error: Optional[BaseException] = None,
    ):
        """
        Initialize the mock stream.

        Args:
            data: Bytes the peer "sends".
            chunk_size: Upper bound on the size of each read.
            read_error: Raised by read() once the scripted data runs out.
            write_error: Raised by every write().
        """
        self._data = data
        self._position = 0
        self._chunk_size = chunk_size
        self._read_error = read_error
        self._write_error = write_error
        self._closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        if self._position >= len(self._data):
            if self._read_error is not None:
                raise self._read_error
            return b""

        limit = len(self._data) - self._position
        if max_bytes is not None:
            limit = min(limit, max_bytes)
        if self._chunk_size is not None:
            limit = min(limit, self._chunk_size)

        result = self._data[self._position:self._position + limit]
        self._position += limit
        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        if self._write_error is not None:
            raise self._write_error
        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    @property
    def writes(self) -> List[bytes]:
        """Individual write() payloads, in order."""
        return list(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """Append bytes to what the peer will send."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Every connect_tcp() call hands out a fresh MockNetworkStream primed
    with the response scripted for that (host, port).
    """

    def __init__(self):
        self._responses: Dict[Tuple[str, int], Dict[str, Any]] = {}
        self._failures: Dict[Tuple[str, int], BaseException] = {}
        self._tls_failures: Dict[Tuple[str, int], BaseException] = {}
        self._connections: Dict[Tuple[str, int], List[MockNetworkStream]] = {}
        self._connection_count = 0

    def set_response(
        self,
        host: str,
        port: int,
        data: bytes,
        chunk_size: Optional[int] = None,
        read_error: Optional[BaseException] = None,
        write_error: Optional[BaseException] = None,
    ) -> None:
        """Script the bytes the server at (host, port) replies with."""
        self._responses[(host, port)] = {
            "data": data,
            "chunk_size": chunk_size,
            "read_error": read_error,
            "write_error": write_error,
        }

    def fail_connect(self, host: str, port: int, error: BaseException) -> None:
        """Make connect_tcp() to (host, port) raise ``error``."""
        self._failures[(host, port)] = error

    def fail_tls(self, host: str, port: int, error: BaseException) -> None:
        """Make connect_tls() to (host, port) raise ``error``."""
        self._tls_failures[(host, port)] = error

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> MockNetworkStream:
        key = (host, port)

        if key in self._failures:
            raise self._failures[key]

        script = self._responses.get(key, {})
        stream = MockNetworkStream(
            data=script.get("data", b""),
            chunk_size=script.get("chunk_size"),
            read_error=script.get("read_error"),
            write_error=script.get("write_error"),
        )
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345 + self._connection_count))
        self._connections.setdefault(key, []).append(stream)
        self._connection_count += 1

        return stream

    async def connect_tls(
        self,
        stream: MockNetworkStream,
        host: str,
        port: int,
        ssl_context: ssl.SSLContext,
        timeout: Optional[float] = None,
    ) -> MockNetworkStream:
        key = (host, port)
        if key in self._tls_failures:
            raise self._tls_failures[key]

        stream.set_extra_info("ssl_object", True)
        stream.set_extra_info("ssl_context", ssl_context)
        return stream

    def get_connection(self, host: str, port: int) -> Optional[MockNetworkStream]:
        """Most recent connection opened to (host, port), if any."""
        connections = self._connections.get((host, port))
        return connections[-1] if connections else None

    @property
    def connection_count(self) -> int:
        return self._connection_count

    def reset(self) -> None:
        """Reset all scripted responses and recorded connections."""
        self._responses.clear()
        self._failures.clear()
        self._tls_failures.clear()
        self._connections.clear()
        self._connection_count = 0
