"""Buffered reader that runs a byte filter over every refill of its source."""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, Protocol


LOGGER = logging.getLogger(__name__)


class ByteSource(Protocol):
    """Buffered binary stream exposing its refill buffer."""

    def peek(self, size: int = 0, /) -> bytes:
        """Fill the internal buffer and return the unread bytes, ``b""`` at EOF."""

    def read(self, size: int = -1, /) -> bytes:
        """Consume ``size`` bytes from the internal buffer."""


class StreamFilter(ABC):
    """Stateful byte transformation applied chunk by chunk."""

    @abstractmethod
    def filter(self, data: bytes, output: bytearray) -> None:
        """Append the transformation of ``data`` to ``output``."""

    def reset(self) -> None:
        """Return the filter to its initial state."""


class PassthroughFilter(StreamFilter):
    """Filter that copies its input unchanged."""

    def filter(self, data: bytes, output: bytearray) -> None:
        output += data


def as_byte_source(stream: BinaryIO | ByteSource, buffer_size: int | None = None) -> ByteSource:
    """Return ``stream`` as a :class:`ByteSource`, buffering it when needed."""

    if callable(getattr(stream, "peek", None)):
        return stream  # type: ignore[return-value]
    if buffer_size is None:
        buffer_size = io.DEFAULT_BUFFER_SIZE
    if buffer_size <= 0:
        raise ValueError("buffer_size must be positive")
    return io.BufferedReader(stream, buffer_size=buffer_size)  # type: ignore[arg-type]


class FilterReader(io.BufferedIOBase):
    """Present ``stream_filter``'s output over ``source`` as a binary stream.

    The wrapped source is refilled on demand; each refill chunk is passed to
    the filter in full and the translated bytes are served from an internal
    buffer until it runs dry. Output for a given input is therefore
    independent of how the source splits its chunks, provided the filter
    carries its own state across calls.
    """

    def __init__(
        self,
        source: ByteSource,
        stream_filter: StreamFilter,
        *,
        close_source: bool = False,
    ) -> None:
        super().__init__()
        self._source: ByteSource | None = source
        self._filter = stream_filter
        self._close_source = close_source
        self._buffer = bytearray()
        self._pos = 0

    @property
    def stream_filter(self) -> StreamFilter:
        return self._filter

    # Buffered source API ------------------------------------------------

    def fill_buffer(self) -> memoryview:
        """Return the unconsumed filtered bytes, refilling when exhausted."""

        source = self._require_source()
        while self._pos >= len(self._buffer):
            chunk = source.peek()
            if not chunk:
                LOGGER.debug("source exhausted")
                self._buffer = bytearray()
                self._pos = 0
                break
            output = bytearray()
            self._filter.filter(chunk, output)
            source.read(len(chunk))
            LOGGER.debug("filtered %d source bytes into %d", len(chunk), len(output))
            self._buffer = output
            self._pos = 0
        return memoryview(self._buffer)[self._pos :]

    def consume(self, amount: int) -> None:
        """Mark ``amount`` buffered bytes as delivered."""

        if amount < 0:
            raise ValueError("amount must not be negative")
        self._pos = min(self._pos + amount, len(self._buffer))

    # io.BufferedIOBase API ----------------------------------------------

    def readable(self) -> bool:
        return True

    def peek(self, size: int = 0, /) -> bytes:
        return bytes(self.fill_buffer())

    def read(self, size: int | None = -1, /) -> bytes:
        if size is None or size < 0:
            return self._read_all()
        data = self._take(size, refill=False)
        if len(data) < size:
            data += self._take(size - len(data), refill=True)
        return data

    def read1(self, size: int = -1, /) -> bytes:
        if size < 0:
            size = len(self.fill_buffer())
        return self._take(size, refill=True)

    def readinto(self, b: bytearray | memoryview) -> int:  # type: ignore[override]
        with memoryview(b) as view, view.cast("B") as target:
            data = self.read(len(target))
            target[: len(data)] = data
        return len(data)

    def readinto1(self, b: bytearray | memoryview) -> int:  # type: ignore[override]
        with memoryview(b) as view, view.cast("B") as target:
            data = self.read1(len(target))
            target[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if self.closed:
            return
        try:
            source = self._source
            self._source = None
            if self._close_source and source is not None:
                closer = getattr(source, "close", None)
                if callable(closer):
                    closer()
        finally:
            super().close()

    # Helpers ------------------------------------------------------------

    def _require_source(self) -> ByteSource:
        if self._source is None:
            raise ValueError("I/O operation on closed filter reader")
        return self._source

    def _take(self, size: int, *, refill: bool) -> bytes:
        if size == 0:
            return b""
        if refill:
            self.fill_buffer()
        else:
            self._require_source()
        end = min(self._pos + size, len(self._buffer))
        data = bytes(self._buffer[self._pos : end])
        self.consume(len(data))
        return data

    def _read_all(self) -> bytes:
        chunks: list[bytes] = []
        while True:
            chunk = self.read1()
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


__all__ = [
    "ByteSource",
    "FilterReader",
    "PassthroughFilter",
    "StreamFilter",
    "as_byte_source",
]
