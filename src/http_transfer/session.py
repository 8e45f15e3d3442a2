"""
Transfer session for http_transfer.

A Session stands for the initialized transfer subsystem: it owns the
network backend and the shared TLS context every request uses. Callers
create one, initialize it once, pass it to every request and tear it
down when they are done. Nothing is kept in module globals.
"""

import logging
import ssl
import threading
from typing import Optional, Tuple

from .exceptions import SessionError
from .network.asyncio_backend import AsyncioNetworkBackend
from .network.backend import NetworkBackend
from .network.utils import create_ssl_context

logger = logging.getLogger(__name__)


class Session:
    """
    Explicit handle on the transfer subsystem.

    :meth:`initialize` and :meth:`teardown` are idempotent and serialized
    by a lock, so concurrent first calls from several threads still
    initialize exactly once. Request functions never initialize a session
    on their own.

    Usage::

        with Session() as session:
            result = get(session, "localhost", 5000, "/home")
    """

    # Default configuration. None means no limit, matching a plain
    # blocking transfer.
    DEFAULT_CONNECT_TIMEOUT: Optional[float] = None
    DEFAULT_READ_TIMEOUT: Optional[float] = None
    DEFAULT_WRITE_TIMEOUT: Optional[float] = None
    DEFAULT_WRITE_CHUNK_SIZE = 16384

    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        write_chunk_size: Optional[int] = None,
        verbose: bool = False,
    ):
        """
        Initialize Session. No resources are acquired until initialize().

        Args:
            backend: Network backend to use; AsyncioNetworkBackend if None
            ssl_context: TLS context for https targets; a verifying
                default context if None
            connect_timeout: Timeout for opening a connection in seconds
            read_timeout: Timeout for each network read in seconds
            write_timeout: Timeout for each network write in seconds
            write_chunk_size: Largest piece of request body sent at once
            verbose: Log every exchange at INFO level
        """
        self._backend_override = backend
        self._ssl_context_override = ssl_context

        self.connect_timeout = connect_timeout if connect_timeout is not None else self.DEFAULT_CONNECT_TIMEOUT
        self.read_timeout = read_timeout if read_timeout is not None else self.DEFAULT_READ_TIMEOUT
        self.write_timeout = write_timeout if write_timeout is not None else self.DEFAULT_WRITE_TIMEOUT
        self.write_chunk_size = write_chunk_size or self.DEFAULT_WRITE_CHUNK_SIZE
        self.verbose = verbose

        self._lock = threading.Lock()
        self._initialized = False
        self._backend: Optional[NetworkBackend] = None
        self._ssl_context: Optional[ssl.SSLContext] = None

    def initialize(self) -> "Session":
        """
        Set up the backend and TLS context. Repeated calls do nothing.

        Returns:
            self, for chaining

        Raises:
            SessionError: If the TLS context cannot be created
        """
        with self._lock:
            if self._initialized:
                logger.debug("Session already initialized")
                return self

            try:
                ssl_context = self._ssl_context_override or create_ssl_context()
            except ssl.SSLError as e:
                logger.error(f"TLS setup failed: {e}")
                raise SessionError(f"TLS setup failed: {e}", cause=e) from e

            self._ssl_context = ssl_context
            self._backend = self._backend_override or AsyncioNetworkBackend()
            self._initialized = True

        logger.debug(f"Session initialized with {type(self._backend).__name__}")
        return self

    def teardown(self) -> None:
        """
        Release the backend and TLS context. Repeated calls do nothing.
        """
        with self._lock:
            if not self._initialized:
                logger.debug("Session not initialized, nothing to tear down")
                return

            self._backend = None
            self._ssl_context = None
            self._initialized = False

        logger.debug("Session torn down")

    def require_initialized(self) -> None:
        """
        Raises:
            SessionError: If initialize() has not been called, or
                teardown() has been called since
        """
        if not self._initialized:
            raise SessionError("Session is not initialized; call initialize() first")

    def resources(self) -> Tuple[NetworkBackend, ssl.SSLContext]:
        """
        Snapshot of the backend and TLS context, taken under the session lock.

        Raises:
            SessionError: If the session is not initialized
        """
        with self._lock:
            self.require_initialized()
            return self._backend, self._ssl_context

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def backend(self) -> NetworkBackend:
        self.require_initialized()
        return self._backend

    @property
    def ssl_context(self) -> ssl.SSLContext:
        self.require_initialized()
        return self._ssl_context

    def __enter__(self) -> "Session":
        return self.initialize()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()

    def __repr__(self) -> str:
        state = "initialized" if self._initialized else "uninitialized"
        return f"<Session {state}>"
