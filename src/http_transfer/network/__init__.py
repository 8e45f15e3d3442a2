"""
Network backend components for http_transfer.

This module provides the low-level networking abstractions the exchange
driver runs over.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    bracket_host,
    create_ssl_context,
    format_host_header,
    is_ipv6_address,
    validate_port,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "bracket_host",
    "create_ssl_context",
    "format_host_header",
    "is_ipv6_address",
    "validate_port",
]
