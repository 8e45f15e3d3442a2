"""
asyncio based network backend.

Connections are opened with :func:`asyncio.open_connection`; TLS is
negotiated on the open connection with :meth:`asyncio.StreamWriter.start_tls`.
"""

import asyncio
import logging
import ssl
from typing import Any, Optional

from .backend import NetworkBackend
from .stream import NetworkStream

logger = logging.getLogger(__name__)


class AsyncioNetworkStream(NetworkStream):
    """Network stream over an asyncio reader/writer pair."""

    DEFAULT_READ_SIZE = 65536

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")
        return await self._reader.read(max_bytes or self.DEFAULT_READ_SIZE)

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._writer.write(data)
        await self._writer.drain()

    async def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: str,
    ) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        await self._writer.start_tls(ssl_context, server_hostname=server_hostname)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (OSError, ssl.SSLError) as e:
            # Peer already gone.
            logger.debug(f"Error while closing stream: {e}")

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._writer.get_extra_info(name)

    @property
    def is_closed(self) -> bool:
        return self._closed


class AsyncioNetworkBackend(NetworkBackend):
    """Network backend using the running asyncio event loop."""

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> AsyncioNetworkStream:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
        logger.debug(f"Connected to {host}:{port}")
        return AsyncioNetworkStream(reader, writer)

    async def connect_tls(
        self,
        stream: AsyncioNetworkStream,
        host: str,
        port: int,
        ssl_context: ssl.SSLContext,
        timeout: Optional[float] = None,
    ) -> AsyncioNetworkStream:
        await asyncio.wait_for(
            stream.start_tls(ssl_context, server_hostname=host),
            timeout=timeout,
        )
        logger.debug(f"TLS established with {host}:{port}")
        return stream
