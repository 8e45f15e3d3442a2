"""
HTTP primitives for http_transfer.

This module defines the request target helpers, the URL decomposer and
the immutable request/response records passed between layers.
"""

import re
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple, Union

from urllib.parse import urlsplit

from .exceptions import URLError
from .network.utils import bracket_host, format_host_header, validate_port
from .streams import ByteSource


# Type aliases for better readability
Headers = List[Tuple[bytes, bytes]]
StatusCode = int

DEFAULT_PORT = 80
SUPPORTED_SCHEMES = ("http", "https")

_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


class ParsedURL(NamedTuple):
    """Immutable result of :func:`parse_url`."""
    host: str
    port: int
    path: str
    query: str
    scheme: str = "http"

    @property
    def target(self) -> str:
        """Request target sent on the request line (path plus query)."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def is_tls(self) -> bool:
        return self.scheme == "https"


def encode_host(host: str) -> bytes:
    """
    Wire form of a host name; non-ASCII names are IDNA encoded.

    Raises:
        URLError: If the name has no IDNA form (empty or overlong labels)
    """
    if host.isascii():
        return host.encode()
    try:
        return host.encode("idna")
    except UnicodeError as e:
        raise URLError(f"Invalid host {host!r}: {e}", cause=e) from e


def build_target(host: str, port: int, path: str) -> str:
    """
    Join host, port and path into a ``host:port/path`` target string.

    Every leading ``/`` is stripped from ``path`` first, so ``"/home"``
    and ``"home"`` produce the same target.

    Args:
        host: Hostname, IP address, or ``scheme://host``
        port: Port number
        path: Path, optionally with a query string

    Returns:
        The joined target string

    Raises:
        URLError: If the host is empty or cannot be IDNA encoded, or the
            port is invalid
    """
    if not isinstance(host, str) or not host.strip():
        raise URLError(f"Invalid host: {host!r}")
    if not isinstance(path, str):
        raise URLError(f"Invalid path: {path!r}")
    if isinstance(port, bool):
        raise URLError(f"Invalid port: {port!r}")

    try:
        port = validate_port(port)
    except ValueError as e:
        raise URLError(str(e), cause=e) from e

    encode_host(_SCHEME_PREFIX.sub("", host, count=1))

    return f"{bracket_host(host)}:{port}/{path.lstrip('/')}"


def _guess_scheme(url: str, default_scheme: str) -> str:
    """Prefix ``default_scheme`` when the URL does not start with one."""
    if _SCHEME_PREFIX.match(url):
        return url
    if url.startswith("//"):
        return f"{default_scheme}:{url}"
    return f"{default_scheme}://{url}"


def parse_url(url: str, default_scheme: str = "http") -> ParsedURL:
    """
    Decompose a URL into host, port, path and query.

    The URL may omit the scheme and the port. A missing port is reported
    as 80, a missing path as ``/`` and a missing query as ``""``. The
    fragment, if any, is dropped.

    Args:
        url: URL string to parse
        default_scheme: Scheme assumed when the URL has none

    Returns:
        ParsedURL with independently owned string components

    Raises:
        URLError: If the URL is empty, has no host, uses an unsupported
            scheme, or carries a malformed port
    """
    if not isinstance(url, str):
        raise URLError(f"URL must be str, not {type(url).__name__}")

    url = url.strip()
    if not url:
        raise URLError("Empty URL")

    try:
        split = urlsplit(_guess_scheme(url, default_scheme))
    except ValueError as e:
        raise URLError(f"Malformed URL {url!r}: {e}", cause=e) from e

    scheme = split.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise URLError(
            f"Unsupported scheme {scheme!r} in {url!r}",
            unsupported_scheme=True,
        )

    host = split.hostname
    if not host:
        raise URLError(f"No hostname found in URL {url!r}")

    # Accessing .port validates it; urllib raises ValueError for garbage
    # and for values outside 0..65535.
    try:
        port = split.port
    except ValueError as e:
        raise URLError(f"Malformed port in {url!r}", cause=e) from e

    if port is None:
        port = DEFAULT_PORT

    return ParsedURL(
        host=host,
        port=port,
        path=split.path or "/",
        query=split.query,
        scheme=scheme,
    )


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request representation.

    The body, when present, is a :class:`ByteSource` the exchange driver
    pulls from; the request itself never holds the bytes.
    """

    method: bytes
    url: ParsedURL
    headers: Headers = field(default_factory=list)
    body: Optional[ByteSource] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, bytes):
            raise ValueError("method must be bytes")

        if not isinstance(self.url, ParsedURL):
            raise ValueError("url must be a ParsedURL")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if self.body is not None and not isinstance(self.body, ByteSource):
            raise ValueError("body must be a ByteSource")

    @classmethod
    def create(
        cls,
        method: Union[str, bytes],
        url: Union[str, ParsedURL],
        headers: Optional[List[Tuple[Union[str, bytes], Union[str, bytes]]]] = None,
        body: Optional[ByteSource] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        A ``Host`` header is prepended unless one is already present.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL string or ParsedURL
            headers: Optional list of (name, value) header tuples
            body: Optional source for the request body

        Returns:
            New Request instance
        """
        if isinstance(method, str):
            method = method.encode()

        if isinstance(url, str):
            url = parse_url(url)

        converted: Headers = []
        for name, value in headers or []:
            if isinstance(name, str):
                name = name.encode()
            if isinstance(value, str):
                value = value.encode()
            converted.append((name, value))

        if not any(name.lower() == b"host" for name, _ in converted):
            host = format_host_header(url.host, url.port, url.scheme)
            converted.insert(0, (b"Host", encode_host(host)))

        return cls(method=method, url=url, headers=converted, body=body)

    @property
    def target(self) -> bytes:
        return self.url.target.encode()


@dataclass(frozen=True)
class Response:
    """
    Immutable record of a response head.

    The body is not part of the record; it lands in whatever sink the
    caller handed to the exchange driver.
    """

    status_code: StatusCode
    reason: bytes = b""
    headers: Headers = field(default_factory=list)
    http_version: bytes = b"1.1"

    def __post_init__(self) -> None:
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
