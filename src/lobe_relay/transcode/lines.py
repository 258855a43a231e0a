"""Reassemble newline-delimited lines from an arbitrarily chunked byte stream."""

from __future__ import annotations

import codecs
from collections.abc import AsyncGenerator, AsyncIterable


class LineReassembler:
    """Turns raw chunks into complete lines.

    Chunk boundaries carry no meaning: a chunk may hold several lines, part
    of one line, or half of a multi-byte character. Text after the last
    newline stays in the carry-over buffer until its terminator arrives.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Unterminated text still waiting for a newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Append a chunk and return every line it completed, in order.

        Lines are returned with trailing whitespace (including any ``\\r``)
        removed.
        """
        self._buffer += self._decoder.decode(chunk)
        lines: list[str] = []
        while True:
            newline = self._buffer.find("\n")
            if newline < 0:
                break
            lines.append(self._buffer[:newline].rstrip())
            self._buffer = self._buffer[newline + 1:]
        return lines


async def iter_lines(
    chunks: AsyncIterable[bytes],
    stop_line: str | None = None,
) -> AsyncGenerator[str, None]:
    """Yield complete lines from ``chunks`` as they become available.

    Pulls one chunk at a time. A trailing partial line left when the source
    is exhausted is dropped. If ``stop_line`` is given, a line equal to it
    ends iteration immediately; it is not yielded and no further chunks are
    read.
    """
    reassembler = LineReassembler()
    async for chunk in chunks:
        for line in reassembler.feed(chunk):
            if stop_line is not None and line == stop_line:
                return
            yield line
