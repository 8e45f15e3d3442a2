"""
Connection factory used by the transfer functions.
"""

import ssl
from abc import ABC, abstractmethod
from typing import Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Opens the single connection each exchange uses.

    A Session holds one backend. Backends keep no connections of their
    own; the caller closes every stream it is handed.
    """

    @abstractmethod
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Open a TCP connection to ``host``:``port``.

        Raises:
            socket.gaierror: If ``host`` does not resolve
            OSError: If the connection is refused or unreachable
            asyncio.TimeoutError: If ``timeout`` seconds pass first
        """

    @abstractmethod
    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        ssl_context: ssl.SSLContext,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Run the TLS handshake on an open ``stream``.

        ``host`` is used for SNI and certificate matching. The returned
        stream replaces ``stream``; on failure the caller still owns
        ``stream`` and must close it.

        Raises:
            ssl.SSLError: If the handshake or verification fails
            asyncio.TimeoutError: If ``timeout`` seconds pass first
        """
