"""Unbuffered rendezvous pipe: a write waits until a read is ready."""

from __future__ import annotations

import asyncio

from bot_typist.streams.base import DONE, ReadResult


class _Rendezvous:
    """Shared state between the two ends of a pipe.

    Two single-shot futures do the handoff: ``_reader_waiting`` is
    completed by the reader when it is ready (True) or has cancelled
    (False), and ``_next_read`` carries the chunk to the reader.  Both
    are replaced after each handoff.
    """

    def __init__(self) -> None:
        self._reader_waiting: asyncio.Future[bool] | None = None
        self._next_read: asyncio.Future[ReadResult] | None = None
        self._reading = False
        self._sending = False
        self._done = False
        self._cancelled = False

    def _ensure_futures(self) -> tuple[asyncio.Future[bool], asyncio.Future[ReadResult]]:
        if self._reader_waiting is None or self._next_read is None:
            loop = asyncio.get_running_loop()
            self._reader_waiting = loop.create_future()
            self._next_read = loop.create_future()
        return self._reader_waiting, self._next_read

    async def read(self) -> ReadResult:
        if self._reading:
            msg = "already reading"
            raise RuntimeError(msg)
        if self._done:
            return DONE

        reader_waiting, next_read = self._ensure_futures()
        self._reading = True
        if not reader_waiting.done():
            reader_waiting.set_result(True)
        try:
            chunk = await next_read
        except asyncio.CancelledError:
            self.cancel()
            raise
        else:
            self._next_read = asyncio.get_running_loop().create_future()
            return chunk
        finally:
            self._reading = False

    def cancel(self) -> None:
        self._cancelled = True
        self._done = True
        reader_waiting, next_read = self._ensure_futures()
        if not reader_waiting.done():
            reader_waiting.set_result(False)
        if not next_read.done():
            next_read.set_result(DONE)

    async def send(self, data: ReadResult) -> bool:
        if self._sending:
            msg = "already writing"
            raise RuntimeError(msg)
        if self._done:
            return False

        self._sending = True
        try:
            reader_waiting, _ = self._ensure_futures()
            if not await reader_waiting or self._cancelled:
                return False
            # The reader replaced _next_read before signalling it was waiting.
            next_read = self._next_read
            if next_read is None:
                msg = "reader is waiting but has no pending read"
                raise RuntimeError(msg)
            if next_read.cancelled():
                # The reading task was cancelled.
                return False
            self._reader_waiting = asyncio.get_running_loop().create_future()
            next_read.set_result(data)
            if data is DONE:
                self._done = True
            return True
        finally:
            self._sending = False


class PipeReader:
    """Read end of a rendezvous pipe."""

    def __init__(self, state: _Rendezvous) -> None:
        self._state = state

    async def read(self) -> ReadResult:
        return await self._state.read()

    def cancel(self) -> None:
        """Stop reading.  Pending and future writes return False."""
        self._state.cancel()


class PipeWriter:
    """Write end of a rendezvous pipe."""

    def __init__(self, state: _Rendezvous) -> None:
        self._state = state

    async def write(self, data: str) -> bool:
        if not data:
            return True
        return await self._state.send(data)

    async def close(self) -> bool:
        """Send ``DONE`` to the reader.  Returns False if it cancelled."""
        return await self._state.send(DONE)


def make_pipe() -> tuple[PipeReader, PipeWriter]:
    """Return a connected reader and writer with no buffering between them."""
    state = _Rendezvous()
    return PipeReader(state), PipeWriter(state)
