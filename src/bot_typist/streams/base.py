"""Reader/Writer protocols shared by the scanner, parser, and child pipe."""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from typing import Final, Literal, Protocol, TypeAlias, TypeVar, runtime_checkable

T = TypeVar("T")


class _Done(enum.Enum):
    DONE = "DONE"

    def __repr__(self) -> str:
        return "DONE"


#: End-of-stream marker returned by ``Reader.read``.  Never a valid chunk.
DONE: Final = _Done.DONE

ReadResult: TypeAlias = str | Literal[_Done.DONE]


class Cancelled(Exception):
    """Raised when a sink declines further writes.

    This is a cooperative stop request, not a fault.  Callers should skip
    any failure reporting when they see it.
    """


class StreamError(Exception):
    """The OS-level stream behind a ``Reader`` or ``Writer`` faulted."""


@runtime_checkable
class Reader(Protocol):
    """A pull-based source of text chunks.

    At most one ``read`` may be outstanding at a time.
    """

    async def read(self) -> ReadResult:
        """Return the next non-empty chunk, or ``DONE`` at the end."""
        ...


@runtime_checkable
class Writer(Protocol):
    """A push-based sink.  At most one ``write`` may be outstanding."""

    async def write(self, data: str) -> bool:
        """Hand off *data*.  Returns False when the sink stopped accepting."""
        ...


@runtime_checkable
class WriteCloser(Writer, Protocol):
    async def close(self) -> object:
        """Signal end-of-stream and return the terminal result."""
        ...


#: Consumes a ``Reader`` and produces a result.
ReadHandler: TypeAlias = Callable[[Reader], Awaitable[T]]


class StringWriter:
    """Writer that accumulates everything written into ``buffer``."""

    def __init__(self) -> None:
        self.buffer = ""
        self.closed = False

    async def write(self, data: str) -> bool:
        if self.closed:
            msg = "write after close"
            raise RuntimeError(msg)
        self.buffer += data
        return True

    async def close(self) -> bool:
        self.closed = True
        return True


async def read_all(reader: Reader) -> str:
    """Read until ``DONE`` and return the concatenated chunks."""
    chunks: list[str] = []
    while True:
        chunk = await reader.read()
        if chunk is DONE:
            return "".join(chunks)
        chunks.append(chunk)
