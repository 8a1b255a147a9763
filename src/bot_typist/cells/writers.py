"""CellWriter that renders a reply on the terminal."""

from __future__ import annotations

import click

from bot_typist.cells.types import CellType


class EchoCellWriter:
    """Echoes cells to stdout in the same ``%<type>`` format the bot uses.

    A header line is printed whenever a new cell starts, so the output can
    be fed back through ``BotResponse`` to recover the same cells.
    """

    def __init__(self, code_type: CellType = CellType.PYTHON) -> None:
        self._code_type = code_type
        self._at_line_start = True
        self._closed = False

    def _start(self, cell_type: CellType) -> bool:
        if self._closed:
            return False
        prefix = "" if self._at_line_start else "\n"
        click.echo(f"{prefix}%{cell_type.value}")
        self._at_line_start = True
        return True

    async def start_code_cell(self) -> bool:
        return self._start(self._code_type)

    async def start_markdown_cell(self) -> bool:
        return self._start(CellType.MARKDOWN)

    async def write(self, data: str) -> bool:
        if self._closed:
            return False
        if not data:
            return True
        click.echo(data, nl=False)
        self._at_line_start = data.endswith("\n")
        return True

    async def close(self) -> bool:
        if self._closed:
            return False
        if not self._at_line_start:
            click.echo()
        self._closed = True
        return True
