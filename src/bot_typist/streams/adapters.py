"""Adapt asyncio byte streams to the text ``Reader`` protocol."""

from __future__ import annotations

import asyncio
import codecs

from bot_typist.streams.base import DONE, ReadHandler, ReadResult, StreamError, T

#: Bytes requested from the OS stream per read.
_READ_SIZE = 64 * 1024


class StreamReaderAdapter:
    """A ``Reader`` over an ``asyncio.StreamReader`` of UTF-8 bytes.

    Decoding is incremental, so a character split across two OS reads is
    delivered whole.  Empty chunks are never returned.
    """

    def __init__(self, stream: asyncio.StreamReader, encoding: str = "utf-8") -> None:
        self._stream = stream
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._reading = False
        self._done = False

    async def read(self) -> ReadResult:
        if self._reading:
            msg = "already reading"
            raise RuntimeError(msg)
        self._reading = True
        try:
            while not self._done:
                try:
                    data = await self._stream.read(_READ_SIZE)
                except OSError as exc:
                    raise StreamError(f"error reading stream: {exc}") from exc

                if not data:
                    self._done = True
                    tail = self._decoder.decode(b"", final=True)
                    if tail:
                        return tail
                    break

                text = self._decoder.decode(data)
                if text:
                    return text
            return DONE
        finally:
            self._reading = False


async def copy_stream(stream: asyncio.StreamReader, handler: ReadHandler[T]) -> T:
    """Run *handler* against the text of *stream* and return its result."""
    return await handler(StreamReaderAdapter(stream))
