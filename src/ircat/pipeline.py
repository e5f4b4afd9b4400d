"""Copy loop that drives a filtered reader into a byte sink."""

from __future__ import annotations

from typing import BinaryIO, Protocol

from .filter import ByteSource, FilterReader, StreamFilter, as_byte_source
from .translator import IRCatFilter


class ByteSink(Protocol):
    """Destination accepting raw bytes."""

    def write(self, data: bytes, /) -> int | None:
        """Write ``data`` and return the number of bytes accepted."""


def copy_stream(reader: FilterReader, sink: ByteSink, *, flush: bool = False) -> int:
    """Write every byte produced by ``reader`` into ``sink``.

    With ``flush`` set, the sink is flushed after each translated chunk so
    interactive input (``tail -f``) reaches the terminal as it arrives.
    """

    total = 0
    while True:
        chunk = reader.read1()
        if not chunk:
            return total
        view = memoryview(chunk)
        while view:
            written = sink.write(view)
            if written is None:
                written = len(view)
            if written == 0:
                raise OSError("failed to write whole buffer")
            view = view[written:]
            total += written
        if flush:
            flusher = getattr(sink, "flush", None)
            if callable(flusher):
                flusher()


def ircat(
    source: ByteSource | BinaryIO,
    sink: ByteSink,
    *,
    stream_filter: StreamFilter | None = None,
) -> int:
    """Stream ``source`` into ``sink`` translating IRC colour codes to ANSI.

    Returns the number of bytes written. Errors raised by the source or the
    sink propagate unchanged, and :class:`~ircat.colors.UnknownColorError`
    aborts the copy when a directive names a colour outside the palette.

    >>> import io
    >>> out = io.BytesIO()
    >>> ircat(io.BytesIO(b"Colors \\x034red \\x033green \\x032blue\\n"), out)
    47
    >>> out.getvalue()
    b'Colors \\x1b[31mred \\x1b[32mgreen \\x1b[34mblue\\x1b[39m\\x1b[49m\\n'
    """

    buffered = as_byte_source(source)
    reader = FilterReader(buffered, stream_filter or IRCatFilter())
    try:
        return copy_stream(reader, sink)
    finally:
        reader.close()
        if buffered is not source:
            # Leave the caller's stream open once the temporary buffer goes away.
            buffered.detach()  # type: ignore[attr-defined]


__all__ = ["ByteSink", "copy_stream", "ircat"]
