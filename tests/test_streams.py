"""
Unit tests for body sinks and sources.

Tests ResponseBuffer accumulation and RequestBodySource cursor
behavior independently of any network exchange.
"""

import pytest

from http_transfer.exceptions import StreamError
from http_transfer.streams import ByteSink, ByteSource, RequestBodySource, ResponseBuffer


class TestResponseBuffer:
    """Test ResponseBuffer accumulation."""

    def test_starts_empty(self) -> None:
        buffer = ResponseBuffer()
        assert len(buffer) == 0
        assert not buffer
        assert buffer.getvalue() == b""
        assert buffer.terminated() == b"\x00"

    def test_length_is_sum_of_chunks(self, sample_chunks) -> None:
        """Final length equals the sum of chunk lengths."""
        buffer = ResponseBuffer()
        for chunk in sample_chunks:
            assert buffer.append(chunk) == len(chunk)

        assert len(buffer) == sum(len(chunk) for chunk in sample_chunks)
        assert buffer.getvalue() == b"Hello, World!"

    def test_terminated_after_every_append(self, sample_chunks) -> None:
        """The NUL terminator sits exactly at the current length."""
        buffer = ResponseBuffer()
        for chunk in sample_chunks:
            buffer.append(chunk)
            terminated = buffer.terminated()
            assert len(terminated) == len(buffer) + 1
            assert terminated[len(buffer)] == 0
            assert terminated[:-1] == buffer.getvalue()

    def test_empty_chunk_is_noop(self) -> None:
        buffer = ResponseBuffer()
        buffer.append(b"abc")
        assert buffer.append(b"") == 0
        assert buffer.getvalue() == b"abc"

    def test_bytes_are_not_transformed(self) -> None:
        """Embedded NULs and repeated chunks are kept as-is."""
        buffer = ResponseBuffer()
        buffer.append(b"a\x00b")
        buffer.append(b"a\x00b")
        assert buffer.getvalue() == b"a\x00ba\x00b"
        assert len(buffer) == 6

    def test_accepts_bytearray_and_memoryview(self) -> None:
        buffer = ResponseBuffer()
        buffer.append(bytearray(b"ab"))
        buffer.append(memoryview(b"cd"))
        assert buffer.getvalue() == b"abcd"

    def test_write_alias(self) -> None:
        buffer = ResponseBuffer()
        assert buffer.write(b"xyz") == 3
        assert buffer.getvalue() == b"xyz"

    def test_detach_transfers_ownership(self) -> None:
        buffer = ResponseBuffer()
        buffer.append(b"payload")

        data = buffer.detach()

        assert data == b"payload"
        assert isinstance(data, bytes)
        assert len(buffer) == 0
        buffer.append(b"more")
        assert data == b"payload"

    def test_growth_failure_raises_stream_error(self) -> None:
        """MemoryError while growing is surfaced, and the buffer is kept."""

        buffer = ResponseBuffer()
        buffer.append(b"keep")

        class FailingBytearray(bytearray):
            def __iadd__(self, other):
                raise MemoryError()

        buffer._data = FailingBytearray(b"keep")

        with pytest.raises(StreamError, match="Cannot grow response buffer"):
            buffer.append(b"more")

        assert buffer.getvalue() == b"keep"

    def test_is_a_sink(self) -> None:
        assert isinstance(ResponseBuffer(), ByteSink)


class TestRequestBodySource:
    """Test RequestBodySource cursor behavior."""

    def test_bytes_body(self) -> None:
        source = RequestBodySource(b"Hello World")
        assert source.total == 11
        assert source.remaining == 11
        assert not source.exhausted

    def test_str_body_is_utf8_encoded(self) -> None:
        source = RequestBodySource("héllo")
        assert source.total == len("héllo".encode("utf-8"))
        assert source.read(100) == "héllo".encode("utf-8")

    def test_bytearray_body_is_copied(self) -> None:
        data = bytearray(b"abc")
        source = RequestBodySource(data)
        data[0] = ord("z")
        assert source.read(10) == b"abc"

    def test_rejects_other_types(self) -> None:
        with pytest.raises(TypeError, match="body must be"):
            RequestBodySource(123)

    def test_read_respects_capacity(self) -> None:
        source = RequestBodySource(b"abcdef")
        assert source.read(4) == b"abcd"
        assert source.remaining == 2
        assert source.read(4) == b"ef"
        assert source.remaining == 0
        assert source.exhausted

    def test_capacity_one_delivers_everything_once_in_order(self) -> None:
        body = b"Hello World"
        source = RequestBodySource(body)

        pieces = []
        while True:
            piece = source.read(1)
            if not piece:
                break
            assert len(piece) == 1
            pieces.append(piece)

        assert b"".join(pieces) == body
        assert len(pieces) == len(body)

    def test_reads_after_exhaustion_are_noops(self) -> None:
        source = RequestBodySource(b"ab")
        source.read(10)
        assert source.read(10) == b""
        assert source.read(1) == b""
        assert source.remaining == 0

    def test_empty_body(self) -> None:
        source = RequestBodySource(b"")
        assert source.exhausted
        assert source.read(1) == b""

    def test_non_positive_capacity(self) -> None:
        source = RequestBodySource(b"ab")
        with pytest.raises(ValueError):
            source.read(0)

    def test_rewind(self) -> None:
        source = RequestBodySource(b"abc")
        source.read(3)
        source.rewind()
        assert source.remaining == 3
        assert source.read(3) == b"abc"

    def test_is_a_source(self) -> None:
        assert isinstance(RequestBodySource(b""), ByteSource)
