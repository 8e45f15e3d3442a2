"""
Pytest configuration for http_transfer tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import List, Optional, Tuple

import pytest

from http_transfer.network import MockNetworkBackend
from http_transfer.session import Session


def make_response(
    body: bytes = b"",
    status: int = 200,
    reason: bytes = b"OK",
    headers: Optional[List[Tuple[bytes, bytes]]] = None,
    content_length: Optional[int] = None,
) -> bytes:
    """Build raw HTTP/1.1 response bytes with a Content-Length header."""
    if content_length is None:
        content_length = len(body)
    lines = [b"HTTP/1.1 %d %s" % (status, reason)]
    for name, value in headers or []:
        lines.append(name + b": " + value)
    lines.append(b"Content-Length: %d" % content_length)
    return b"\r\n".join(lines) + b"\r\n\r\n" + body


@pytest.fixture
def response_bytes():
    """Factory for raw HTTP/1.1 response bytes."""
    return make_response


@pytest.fixture
def mock_backend():
    """Create a mock network backend."""
    return MockNetworkBackend()


@pytest.fixture
def session(mock_backend):
    """Initialized session running over the mock backend."""
    session = Session(backend=mock_backend).initialize()
    yield session
    session.teardown()


@pytest.fixture
def sample_chunks():
    """Sample chunk sequence for sink tests."""
    return [
        b"Hello",
        b"",
        b", ",
        b"World",
        b"!",
    ]


class EchoHandler(BaseHTTPRequestHandler):
    """Echoes POST bodies back; answers GET with the request path."""

    def _reply(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        if self.path.startswith("/missing"):
            self._reply(404, b"not found")
            return
        self._reply(200, self.path.encode())

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.received_headers.append(dict(self.headers))
        self._reply(200, body)

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def echo_server():
    """Local threaded HTTP server; the port is server_address[1]."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), EchoHandler)
    server.received_headers = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
