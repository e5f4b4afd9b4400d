from __future__ import annotations

import io
from typing import Iterable, List

import pytest

from ircat.colors import UnknownColorError
from ircat.filter import FilterReader, PassthroughFilter, StreamFilter, as_byte_source
from ircat.translator import IRCatFilter


class ChunkedSource:
    """Byte source that serves a fixed sequence of refill chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self.chunks: List[bytes] = [chunk for chunk in chunks if chunk]
        self.peeks = 0
        self.closed = False

    def peek(self, size: int = 0) -> bytes:
        self.peeks += 1
        return self.chunks[0] if self.chunks else b""

    def read(self, size: int = -1) -> bytes:
        head = self.chunks[0]
        taken, rest = head[:size], head[size:]
        if rest:
            self.chunks[0] = rest
        else:
            self.chunks.pop(0)
        return taken

    def close(self) -> None:
        self.closed = True


class FailingSource:
    def peek(self, size: int = 0) -> bytes:
        raise OSError("device unplugged")

    def read(self, size: int = -1) -> bytes:  # pragma: no cover - never reached
        raise AssertionError("read should not be called")


class DoublingFilter(StreamFilter):
    def __init__(self) -> None:
        self.calls: List[bytes] = []

    def filter(self, data: bytes, output: bytearray) -> None:
        self.calls.append(bytes(data))
        for byte in data:
            output.append(byte)
            output.append(byte)


class DroppingFilter(StreamFilter):
    def filter(self, data: bytes, output: bytearray) -> None:
        output += data.replace(b"x", b"")


def test_fill_buffer_filters_whole_chunk_and_consumes_source() -> None:
    source = ChunkedSource([b"ab", b"c"])
    stream_filter = DoublingFilter()
    reader = FilterReader(source, stream_filter)

    assert bytes(reader.fill_buffer()) == b"aabb"
    assert source.chunks == [b"c"]
    assert stream_filter.calls == [b"ab"]

    # Unconsumed bytes are served again without touching the source.
    assert bytes(reader.fill_buffer()) == b"aabb"
    assert stream_filter.calls == [b"ab"]


def test_consume_advances_and_clamps() -> None:
    reader = FilterReader(ChunkedSource([b"abc"]), PassthroughFilter())

    reader.fill_buffer()
    reader.consume(1)
    assert bytes(reader.fill_buffer()) == b"bc"

    reader.consume(100)
    assert bytes(reader.fill_buffer()) == b""


def test_consume_rejects_negative_amounts() -> None:
    reader = FilterReader(ChunkedSource([b"abc"]), PassthroughFilter())
    with pytest.raises(ValueError):
        reader.consume(-1)


def test_read_serves_buffer_then_refills_once() -> None:
    reader = FilterReader(ChunkedSource([b"abc", b"def", b"ghi"]), PassthroughFilter())

    assert reader.read(2) == b"ab"
    assert reader.read(3) == b"cde"
    assert reader.read(10) == b"fghi"
    assert reader.read(10) == b""


def test_read_without_size_drains_stream() -> None:
    reader = FilterReader(ChunkedSource([b"abc", b"def"]), DoublingFilter())
    assert reader.read() == b"aabbccddeeff"
    assert reader.read() == b""


def test_read_zero_bytes_does_not_refill() -> None:
    source = ChunkedSource([b"abc"])
    reader = FilterReader(source, PassthroughFilter())
    assert reader.read(0) == b""
    assert source.peeks == 0


def test_readinto_fills_caller_buffer() -> None:
    reader = FilterReader(ChunkedSource([b"ab", b"cd"]), PassthroughFilter())
    target = bytearray(3)

    assert reader.readinto(target) == 2
    assert bytes(target[:2]) == b"ab"
    assert reader.readinto(target) == 2
    assert bytes(target[:2]) == b"cd"
    assert reader.readinto(target) == 0


def test_read1_uses_single_refill() -> None:
    reader = FilterReader(ChunkedSource([b"abc", b"def"]), PassthroughFilter())
    assert reader.read1(10) == b"abc"
    assert reader.read1(2) == b"de"
    assert reader.read1() == b"f"
    assert reader.read1() == b""


def test_output_may_be_shorter_than_chunk() -> None:
    reader = FilterReader(ChunkedSource([b"xx", b"axb", b"x"]), DroppingFilter())

    assert bytes(reader.fill_buffer()) == b"ab"
    reader.consume(2)
    assert bytes(reader.fill_buffer()) == b""


def test_readline_and_iteration_follow_buffered_io() -> None:
    source = ChunkedSource([b"\x034one\ntw", b"o\n"])
    with FilterReader(source, IRCatFilter()) as reader:
        assert list(reader) == [b"\x1b[31mone\x1b[39m\x1b[49m\n", b"two\n"]


def test_readers_can_be_stacked() -> None:
    inner = FilterReader(ChunkedSource([b"ab", b"c"]), DoublingFilter())
    outer = FilterReader(inner, DoublingFilter())
    assert outer.read() == b"aaaabbbbcccc"


def test_source_errors_propagate_unchanged() -> None:
    reader = FilterReader(FailingSource(), PassthroughFilter())
    with pytest.raises(OSError, match="device unplugged"):
        reader.read(1)


def test_filter_error_leaves_source_unconsumed() -> None:
    source = ChunkedSource([b"ok\x0317"])
    reader = FilterReader(source, IRCatFilter())

    with pytest.raises(UnknownColorError):
        reader.read()

    assert source.chunks == [b"ok\x0317"]
    assert bytes(reader._buffer) == b""


def test_close_releases_source_only_when_owned() -> None:
    borrowed = ChunkedSource([b"abc"])
    FilterReader(borrowed, PassthroughFilter()).close()
    assert borrowed.closed is False

    owned = ChunkedSource([b"abc"])
    reader = FilterReader(owned, PassthroughFilter(), close_source=True)
    reader.close()
    assert owned.closed is True
    assert reader.closed
    with pytest.raises(ValueError):
        reader.fill_buffer()


def test_as_byte_source_wraps_unbuffered_streams() -> None:
    raw = io.BytesIO(b"payload")
    source = as_byte_source(raw, buffer_size=3)

    assert isinstance(source, io.BufferedReader)
    assert source.peek() == b"pay"


def test_as_byte_source_keeps_buffered_readers() -> None:
    buffered = io.BufferedReader(io.BytesIO(b"payload"))
    assert as_byte_source(buffered) is buffered


def test_as_byte_source_rejects_non_positive_buffer_size() -> None:
    with pytest.raises(ValueError):
        as_byte_source(io.BytesIO(b""), buffer_size=0)


def test_default_reset_is_a_no_op() -> None:
    stream_filter = PassthroughFilter()
    output = bytearray()

    stream_filter.filter(b"before ", output)
    assert stream_filter.reset() is None
    stream_filter.filter(b"\x03after", output)

    assert bytes(output) == b"before \x03after"
