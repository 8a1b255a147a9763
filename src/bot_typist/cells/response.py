"""Split a streamed bot reply into markdown and code cells."""

from __future__ import annotations

import logging
import re
import string

from bot_typist.cells.types import FENCE_STARTS, HEADER_LINES, CellType, CellWriter, HeaderLine
from bot_typist.constants import DEFAULT_CUE, NO_RESPONSE
from bot_typist.streams.base import Cancelled, Reader, Writer
from bot_typist.streams.scanner import Scanner

logger = logging.getLogger(__name__)

#: Characters (besides emoji) that may appear in a cue label.
_CUE_CHARS = string.ascii_letters + string.digits + " "

#: A closing fence, tolerating trailing whitespace.
_FENCE_END_RE = re.compile(r"```[ \t]*")

#: Looks like a header but names no known cell type.
_UNKNOWN_HEADER_RE = re.compile(r"%(\w+)\n")


def _continue(ok: bool) -> None:
    """Turn a sink's False into a ``Cancelled`` stop signal."""
    if not ok:
        raise Cancelled


class BotResponse:
    """Copies a bot's reply to a ``CellWriter`` as it streams in.

    Output is assumed to start inside a markdown cell.  Lines such as
    ``%python`` or ``%markdown`` start a new cell of that type, and a
    fenced code block inside markdown becomes a code cell of its own.
    Each markdown cell starts with a cue (``"🤖: "``); if the bot didn't
    write one, the default cue is added.

    Decisions are made as soon as enough input has arrived, so the output
    is the same no matter how the input is split into chunks.

    Args:
        source: The streamed reply.
        cue: Label added to markdown cells that have none.  An empty cue
            disables this; cues already present are still kept.
    """

    def __init__(self, source: Reader, cue: str = DEFAULT_CUE) -> None:
        self._scanner = Scanner(source)
        self._cue = cue

    @property
    def at_end(self) -> bool:
        return self._scanner.at_end

    async def copy(self, output: CellWriter) -> None:
        """Copy the rest of the reply to *output*.

        Does not close *output*.

        Raises:
            Cancelled: *output* returned False from one of its methods.
                No further calls are made on it.
        """
        # Leading blank lines don't count as a response.
        await self.skip_blank_lines()

        if self.at_end:
            _continue(await output.write(self._add_cue(NO_RESPONSE)))
            return

        header = await self.match_header_line()
        if header is None:
            await self.copy_markdown(output)
            if self.at_end:
                return
            header = await self._expect_header()

        while True:
            await self._scanner.skip_token(header.line)

            if header.type.is_code:
                _continue(await output.start_code_cell())
                await self.skip_blank_lines()
                await self.copy_code(output)
            else:
                _continue(await output.start_markdown_cell())
                await self.skip_blank_lines()
                await self.copy_markdown(output)

            if self.at_end:
                return
            header = await self._expect_header()

    async def skip_blank_lines(self) -> None:
        while await self._scanner.take_blank_line():
            pass

    async def match_header_line(self) -> HeaderLine | None:
        """Return the header marker that comes next, without consuming it."""
        for line, header in HEADER_LINES.items():
            if await self._scanner.starts_with(line):
                return header

        unknown = _UNKNOWN_HEADER_RE.match(self._scanner.buffer)
        if unknown is not None:
            logger.debug("unknown cell type %r, copying header as text", unknown[1])
        return None

    async def _expect_header(self) -> HeaderLine:
        header = await self.match_header_line()
        if header is None:
            msg = "expected a header line"
            raise RuntimeError(msg)
        return header

    async def _match_fence_start(self) -> CellType | None:
        for fence, cell_type in FENCE_STARTS.items():
            if await self._scanner.starts_with(fence):
                return cell_type
        return None

    async def _skip_fence_start(self) -> bool:
        for fence in FENCE_STARTS:
            if await self._scanner.skip_token(fence):
                return True
        return False

    async def _skip_fence_end(self) -> bool:
        if not await self._scanner.starts_with("```"):
            return False
        return await self._scanner.skip_line_matching(_FENCE_END_RE)

    def _add_cue(self, text: str) -> str:
        return f"{self._cue}: {text}" if self._cue else text

    async def _take_cue_label(self) -> str:
        label = ""
        while True:
            part = await self._scanner.take_matching_prefix(_CUE_CHARS)
            part += await self._scanner.take_emoji()
            if not part:
                return label
            label += part

    async def copy_or_add_cue(self, output: Writer) -> bool:
        """Write the cue at the start of a markdown cell.

        Leading spaces and tabs are dropped.  A label followed by ``": "``
        is copied as-is; otherwise the default cue is written, followed by
        whatever was read while looking for a label.

        Returns:
            True if any input was consumed.
        """
        indent = await self._scanner.take_matching_prefix(" \t")
        label = await self._take_cue_label()
        if label and await self._scanner.skip_token(": "):
            # The bot wrote its own cue.
            _continue(await output.write(label + ": "))
        elif self._cue:
            _continue(await output.write(self._add_cue(label)))
        elif label:
            _continue(await output.write(label))
        return bool(indent or label)

    async def _copy_cue_line(self, output: Writer) -> None:
        if not await self.copy_or_add_cue(output) and (
            self.at_end
            or await self.match_header_line() is not None
            or await self._match_fence_start() is not None
        ):
            # Leave it for copy_markdown's loop.
            return
        _continue(await self._scanner.copy_line_to(output))

    async def copy_markdown(self, output: CellWriter) -> None:
        """Copy a markdown cell, up to the next header or the end."""
        if await self._skip_fence_start():
            await self.copy_code_block(output)
        else:
            await self._copy_cue_line(output)

        while not self.at_end and await self.match_header_line() is None:
            if await self._skip_fence_start():
                await self.copy_code_block(output)
            else:
                _continue(await self._scanner.copy_line_to(output))

    async def copy_code_block(self, output: CellWriter) -> None:
        """Copy a fenced code block as a code cell.

        The opening fence has already been consumed.  If prose follows
        the closing fence, a new markdown cell is started for it.
        """
        _continue(await output.start_code_cell())

        while not await self._skip_fence_end():
            if self.at_end:
                return
            _continue(await self._scanner.copy_line_to(output))

        await self.skip_blank_lines()
        if (
            self.at_end
            or await self.match_header_line() is not None
            or await self._match_fence_start() is not None
        ):
            return

        _continue(await output.start_markdown_cell())
        await self._copy_cue_line(output)

    async def copy_code(self, output: Writer) -> None:
        """Copy a code cell, up to the next header or the end.

        Blank lines are dropped; every other line is copied verbatim.
        """
        while not self.at_end:
            await self.skip_blank_lines()
            if self.at_end or await self.match_header_line() is not None:
                return
            _continue(await self._scanner.copy_line_to(output))
