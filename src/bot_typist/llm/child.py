"""A child process that takes writes on stdin and streams stdout to a handler."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from collections.abc import Sequence
from typing import Generic

from bot_typist.helpers import format_stderr_preview
from bot_typist.streams.adapters import StreamReaderAdapter, copy_stream
from bot_typist.streams.base import DONE, ReadHandler, StreamError, T

logger = logging.getLogger(__name__)


class SpawnError(Exception):
    """The child process could not be started."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to start {path!r}: {reason}")


class ChildExitError(Exception):
    """The child process exited with a non-zero code or was killed by a signal.

    A negative ``exit_code`` is the number of the signal that killed it.
    """

    def __init__(self, path: str, args: Sequence[str], exit_code: int, stderr: str) -> None:
        self.path = path
        self.argv = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code < 0:
            try:
                how = f"was killed by signal {signal.Signals(-exit_code).name}"
            except ValueError:
                how = f"was killed by signal {-exit_code}"
        else:
            how = f"exited with code {exit_code}"
        message = f"process {path!r} {how}"
        preview = format_stderr_preview(stderr)
        if preview:
            message += f". Stderr:\n  {preview}"
        super().__init__(message)


class ChildPipe(Generic[T]):
    """Owns one child process for its whole lifetime.

    Writes go to the child's stdin.  Its stdout is handed, in order, to a
    ``ReadHandler`` whose return value becomes the result of ``close``.
    Stderr is collected for error reports and logged at debug level.

    Use ``await ChildPipe.spawn(...)`` to create one.
    """

    def __init__(
        self,
        path: str,
        args: Sequence[str],
        proc: asyncio.subprocess.Process,
        handler: ReadHandler[T],
    ) -> None:
        self._path = path
        self._args = list(args)
        self._proc = proc

        self._writing = False
        self._stdin_closed = False
        self._closing = False
        self._killed = False
        self._stopped_early = False
        self._torn_down = False

        self._result_task: asyncio.Task[T] = asyncio.create_task(self._run_handler(handler))
        self._stderr_task: asyncio.Task[str] = asyncio.create_task(self._capture_stderr())

    @classmethod
    async def spawn(
        cls,
        path: str,
        args: Sequence[str],
        handler: ReadHandler[T],
    ) -> ChildPipe[T]:
        """Start *path* with *args* and begin sending its stdout to *handler*.

        Raises:
            SpawnError: The executable is missing or can't be run.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                path,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise SpawnError(path, "command not found") from exc
        except PermissionError as exc:
            raise SpawnError(path, "permission denied") from exc
        except OSError as exc:
            raise SpawnError(path, str(exc)) from exc

        logger.debug("started %s (pid %d)", path, proc.pid)
        return cls(path, args, proc, handler)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def done(self) -> bool:
        """True once the stdout handler has returned or raised."""
        return self._result_task.done()

    # ------------------------------------------------------------------ #
    # Background tasks
    # ------------------------------------------------------------------ #

    async def _run_handler(self, handler: ReadHandler[T]) -> T:
        stdout = self._proc.stdout
        if stdout is None:
            msg = "child process has no stdout pipe"
            raise RuntimeError(msg)
        try:
            return await copy_stream(stdout, handler)
        finally:
            if not stdout.at_eof():
                # The handler stopped reading; nobody wants the rest.
                self._stopped_early = True
                self.kill()

    async def _capture_stderr(self) -> str:
        stderr = self._proc.stderr
        if stderr is None:
            return ""
        reader = StreamReaderAdapter(stderr)
        chunks: list[str] = []
        while (chunk := await reader.read()) is not DONE:
            logger.debug("%s stderr: %s", self._path, chunk.rstrip())
            chunks.append(chunk)
        return "".join(chunks)

    # ------------------------------------------------------------------ #
    # WriteCloser
    # ------------------------------------------------------------------ #

    async def write(self, data: str) -> bool:
        """Send *data* to the child's stdin, waiting for the pipe to drain.

        Raises:
            RuntimeError: Another write is in flight, or the pipe is done.
            StreamError: The child closed its stdin.
        """
        if self._writing:
            msg = "already writing"
            raise RuntimeError(msg)
        if self._stdin_closed or self._result_task.done():
            msg = "write after done"
            raise RuntimeError(msg)

        stdin = self._proc.stdin
        if stdin is None:
            msg = "child process has no stdin pipe"
            raise RuntimeError(msg)

        self._writing = True
        try:
            stdin.write(data.encode())
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise StreamError(f"error writing to {self._path}: {exc}") from exc
        finally:
            self._writing = False
        return True

    def _close_stdin(self) -> None:
        if self._stdin_closed:
            return
        self._stdin_closed = True
        stdin = self._proc.stdin
        if stdin is not None:
            with contextlib.suppress(BrokenPipeError, ConnectionResetError):
                stdin.close()

    async def close(self) -> T:
        """Close stdin, then wait for the handler's result and the exit code.

        Raises:
            Exception: Whatever the handler raised, in preference to any
                exit-code error.
            ChildExitError: The handler finished but the child failed.
        """
        if self._closing:
            msg = "close called twice"
            raise RuntimeError(msg)
        self._closing = True

        try:
            self._close_stdin()
            try:
                result = await self._result_task
            except Exception:
                self.kill()
                await self._proc.wait()
                raise

            returncode = await self._proc.wait()
            stderr = await self._collect_stderr()
            if self._is_failure(returncode):
                raise ChildExitError(self._path, self._args, returncode, stderr)
            return result
        finally:
            self._teardown()

    def _is_failure(self, returncode: int) -> bool:
        if returncode == 0 or self._stopped_early:
            return False
        # A signal we sent ourselves isn't the child's fault.
        return not (self._killed and returncode < 0)

    async def _collect_stderr(self) -> str:
        try:
            return await self._stderr_task
        except StreamError as exc:
            logger.warning("%s: lost stderr: %s", self._path, exc)
            return ""

    def kill(self) -> None:
        """Force-terminate the child.  Safe to call more than once."""
        if self._killed or self._proc.returncode is not None:
            return
        self._killed = True
        logger.debug("killing %s (pid %d)", self._path, self._proc.pid)
        with contextlib.suppress(ProcessLookupError):
            self._proc.kill()

    async def wait(self) -> int:
        """Wait for the child to exit and return its exit code."""
        return await self._proc.wait()

    def _teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True
        self.kill()
        self._close_stdin()
        for task in (self._result_task, self._stderr_task):
            if not task.done():
                task.cancel()
