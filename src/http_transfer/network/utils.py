"""
Network helpers shared by the backends and the request primitives.
"""

import socket
import ssl
from typing import List, Optional, Union

# Ports left out of the Host header for each scheme.
IMPLICIT_PORTS = {"http": 80, "https": 443}


def create_ssl_context(
    alpn_protocols: Optional[List[str]] = None,
    verify_mode: int = ssl.CERT_REQUIRED,
    check_hostname: bool = True,
    cafile: Optional[str] = None,
) -> ssl.SSLContext:
    """
    Build the TLS context a Session hands to every https exchange.

    Certificates are verified against the system store, or against
    ``cafile`` when given. Turning verification off requires passing
    both ``verify_mode=ssl.CERT_NONE`` and ``check_hostname=False``.

    Raises:
        ssl.SSLError: If the CA bundle cannot be loaded
    """
    context = ssl.create_default_context(cafile=cafile)
    # check_hostname must be cleared before verify_mode can drop to CERT_NONE
    context.check_hostname = check_hostname
    context.verify_mode = verify_mode

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    return context


def is_ipv6_address(host: str) -> bool:
    """True for a bare IPv6 literal such as ``::1`` (no brackets)."""
    try:
        socket.inet_pton(socket.AF_INET6, host)
    except (OSError, ValueError):
        return False
    return True


def bracket_host(host: str) -> str:
    """Wrap IPv6 literals in brackets so a ``:port`` suffix stays unambiguous."""
    if is_ipv6_address(host):
        return f"[{host}]"
    return host


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Value of the Host header for ``host``/``port``.

    The port is omitted when it is the implicit one for ``scheme``.
    """
    host = bracket_host(host)
    if IMPLICIT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"


def validate_port(port: Union[int, str]) -> int:
    """
    Convert ``port`` to an int in 1..65535.

    Raises:
        ValueError: If the value is not a whole number or is out of range
    """
    if isinstance(port, float) and not port.is_integer():
        raise ValueError(f"Invalid port: {port!r}")

    try:
        number = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port!r}")

    if not 1 <= number <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {number}")

    return number
