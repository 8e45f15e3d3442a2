"""
Body sinks and sources for http_transfer.

The exchange driver never holds a body itself. Response bytes are pushed
into a :class:`ByteSink` as they arrive, and request bytes are pulled from
a :class:`ByteSource` in pieces no larger than the driver asks for.
"""

from abc import ABC, abstractmethod
from typing import Union

from .exceptions import StreamError


BodyData = Union[bytes, bytearray, memoryview, str]


class ByteSink(ABC):
    """
    Consumer of incrementally delivered bytes.

    Implementations must accept chunks of any size, including empty ones.
    """

    @abstractmethod
    def append(self, chunk: bytes) -> int:
        """
        Append a chunk to the sink.

        Args:
            chunk: The bytes just received

        Returns:
            Number of bytes consumed, always ``len(chunk)`` on success

        Raises:
            StreamError: If the sink cannot grow to hold the chunk
        """
        pass


class ByteSource(ABC):
    """
    Producer of bytes pulled incrementally by the exchange driver.
    """

    @abstractmethod
    def read(self, max_bytes: int) -> bytes:
        """
        Take up to ``max_bytes`` bytes from the source.

        Returns:
            The next piece of data, or ``b""`` once the source is exhausted
        """
        pass

    @property
    @abstractmethod
    def total(self) -> int:
        """Total number of bytes the source delivers."""
        pass


class ResponseBuffer(ByteSink):
    """
    Growable buffer collecting a response body.

    ``len(buffer)`` is the number of bytes appended so far and never counts
    the terminator that :meth:`terminated` adds.
    """

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, chunk: bytes) -> int:
        size = len(chunk)
        if not size:
            return 0

        try:
            self._data += chunk
        except MemoryError as e:
            raise StreamError(
                f"Cannot grow response buffer by {size} bytes "
                f"(currently {len(self._data)})",
                cause=e,
            ) from e

        return size

    # File-like alias so the buffer can be handed to code that writes.
    write = append

    def getvalue(self) -> bytes:
        """Return the accumulated bytes."""
        return bytes(self._data)

    def terminated(self) -> bytes:
        """Return the accumulated bytes followed by a single NUL byte."""
        return bytes(self._data) + b"\x00"

    def detach(self) -> bytes:
        """
        Hand the accumulated bytes to the caller and empty the buffer.

        After this call the caller owns the returned object and the buffer
        starts over from zero length.
        """
        data = bytes(self._data)
        self._data = bytearray()
        return data

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __repr__(self) -> str:
        return f"<ResponseBuffer size={len(self._data)}>"


class RequestBodySource(ByteSource):
    """
    Cursor over an immutable request body.

    Each :meth:`read` copies ``min(remaining, max_bytes)`` bytes from the
    current position and advances it. Reads after the body is exhausted
    return ``b""`` and change nothing.
    """

    def __init__(self, data: BodyData, encoding: str = "utf-8") -> None:
        """
        Initialize RequestBodySource.

        Args:
            data: Body to send. ``str`` is encoded with ``encoding``
            encoding: Text encoding used for ``str`` bodies

        Raises:
            TypeError: If ``data`` is not bytes-like or text
        """
        if isinstance(data, str):
            data = data.encode(encoding)
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeError(
                f"body must be bytes, bytearray, memoryview or str, "
                f"not {type(data).__name__}"
            )

        self._data = data
        self._position = 0

    def read(self, max_bytes: int) -> bytes:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")

        remaining = self.remaining
        if not remaining:
            return b""

        size = min(remaining, max_bytes)
        chunk = self._data[self._position:self._position + size]
        self._position += size
        return chunk

    def rewind(self) -> None:
        """Move the cursor back to the start of the body."""
        self._position = 0

    @property
    def total(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Bytes not yet delivered."""
        return len(self._data) - self._position

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._data)

    def __repr__(self) -> str:
        return f"<RequestBodySource total={self.total} remaining={self.remaining}>"
