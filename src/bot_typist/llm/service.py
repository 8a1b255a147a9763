"""Run the ``llm`` command and stream its reply."""

from __future__ import annotations

import asyncio
import logging
import shlex

from bot_typist.cells.response import BotResponse
from bot_typist.cells.types import CellWriter
from bot_typist.config.models import LLMConfig
from bot_typist.constants import DEFAULT_CUE, VERSION_PROBE_TIMEOUT
from bot_typist.llm.child import ChildExitError, ChildPipe, SpawnError
from bot_typist.streams.base import Cancelled, Reader, ReadHandler, StreamError, T, read_all

logger = logging.getLogger(__name__)

#: Prefix of the output of ``llm --version``.
_VERSION_PREFIX = "llm, version "


class ProbeTimeoutError(Exception):
    """The command didn't answer ``--version`` in time."""


async def probe_version(path: str, timeout: float = VERSION_PROBE_TIMEOUT) -> str:
    """Run ``path --version`` and return what it printed.

    Raises:
        SpawnError: The command couldn't be started.
        ChildExitError: The command failed.
        ProbeTimeoutError: No answer within *timeout* seconds.  The
            process is killed.
    """
    pipe = await ChildPipe.spawn(path, ["--version"], read_all)
    try:
        return await asyncio.wait_for(pipe.close(), timeout=timeout)
    except TimeoutError as exc:
        pipe.kill()
        await pipe.wait()
        msg = f"{path} --version didn't respond within {timeout}s"
        raise ProbeTimeoutError(msg) from exc


async def check_command_path(path: str, timeout: float = VERSION_PROBE_TIMEOUT) -> str:
    """Verify that *path* runs.

    Returns:
        *path* if the command works, otherwise the empty string.
    """
    if not path:
        return ""

    try:
        output = await probe_version(path, timeout=timeout)
    except SpawnError as exc:
        logger.info("llm command not usable: %s", exc)
        return ""
    except ProbeTimeoutError as exc:
        logger.info("llm command timed out: %s", exc)
        return ""
    except ChildExitError as exc:
        logger.info("llm error: %s", exc)
        return ""

    if not output.startswith(_VERSION_PREFIX):
        logger.info("llm --version output: %s", output.strip())
    return path


class Service:
    """Runs the configured ``llm`` command.

    ``config`` may be replaced between calls; each run uses the current one.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    def command_args(self) -> list[str]:
        """Arguments passed to the command, not including its path."""
        config = self.config
        args: list[str] = []
        if config.system_prompt:
            args.extend(["--system", config.system_prompt])
        if config.model:
            args.extend(["--model", config.model])
        if config.stop:
            args.extend(["-o", "stop", config.stop])
        args.extend(config.extra_arguments)
        return args

    def _log_command(self, args: list[str]) -> None:
        shown = list(args)
        if self.config.system_prompt:
            logger.info("systemPrompt=```\n%s\n```", self.config.system_prompt)
            shown[shown.index("--system") + 1] = "$systemPrompt"
        logger.info("%s", shlex.join([self.config.path, *shown]))

    async def check_command_path(self) -> str:
        return await check_command_path(self.config.path)

    async def run(self, prompt: str, handler: ReadHandler[T]) -> T:
        """Send *prompt* to the command and return what *handler* makes of the reply.

        Raises:
            ValueError: No command path is configured.
            SpawnError: The command couldn't be started.
            Cancelled: The handler's sink stopped the reply.
            ChildExitError: The command failed.
        """
        if not self.config.path:
            msg = "No llm command configured"
            raise ValueError(msg)

        args = self.command_args()
        self._log_command(args)

        try:
            pipe = await ChildPipe.spawn(self.config.path, args, handler)
        except SpawnError as exc:
            logger.error("%s", exc)
            raise

        try:
            if prompt:
                try:
                    await pipe.write(prompt)
                except StreamError as exc:
                    # close() below reports why the command stopped reading.
                    logger.debug("llm stopped reading its prompt: %s", exc)
            return await pipe.close()
        except Cancelled:
            logger.info("(cancelled by user)")
            raise
        except ChildExitError as exc:
            logger.error("%s", exc.stderr.rstrip() if exc.stderr else exc)
            raise
        except Exception as exc:
            logger.error("Unexpected error: %s", exc)
            raise
        finally:
            pipe.kill()

    async def reply(self, prompt: str, output: CellWriter, cue: str = DEFAULT_CUE) -> None:
        """Stream the bot's reply to *prompt* into *output*, then close it."""

        async def split_cells(reader: Reader) -> None:
            await BotResponse(reader, cue=cue).copy(output)

        await self.run(prompt, split_cells)
        if not await output.close():
            raise Cancelled
