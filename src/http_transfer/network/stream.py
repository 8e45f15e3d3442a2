"""
Byte stream one exchange runs over.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    One open connection, plain or TLS.

    Implementations signal I/O failure with ``OSError`` and use after
    :meth:`aclose` with ``RuntimeError``. HTTP11Connection relies on both.
    """

    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Return the next bytes from the peer, at most ``max_bytes``.

        ``b""`` means the peer closed its sending side.
        """

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Send all of ``data``, waiting for the transport to accept it."""

    @abstractmethod
    async def aclose(self) -> None:
        """Close the connection. Calling it again does nothing."""

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """Transport details such as "peername" or "ssl_object"; None if unknown."""

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Whether :meth:`aclose` has been called."""

    @property
    def peer(self) -> str:
        """``host:port`` of the remote end, for log messages."""
        peername = self.get_extra_info("peername")
        if not peername:
            return "unknown peer"
        return f"{peername[0]}:{peername[1]}"
