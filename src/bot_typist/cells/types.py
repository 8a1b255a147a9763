"""Cell kinds, the markers that introduce them, and the sink interface."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class CellType(enum.StrEnum):
    """The closed set of cell kinds a reply can contain."""

    MARKDOWN = "markdown"
    PYTHON = "python"
    TYPESCRIPT = "typescript"

    @property
    def is_code(self) -> bool:
        return self is not CellType.MARKDOWN


@dataclass(frozen=True)
class HeaderLine:
    """A cell-boundary marker such as ``%python\\n``."""

    type: CellType
    line: str


#: Every recognized header marker, keyed by its exact text.
HEADER_LINES: dict[str, HeaderLine] = {
    f"%{t.value}\n": HeaderLine(type=t, line=f"%{t.value}\n") for t in CellType
}

#: Opening fences of code blocks embedded in markdown, keyed by exact text.
FENCE_STARTS: dict[str, CellType] = {
    f"```{t.value}\n": t for t in CellType if t.is_code
}


@runtime_checkable
class CellWriter(Protocol):
    """Sink that receives a reply as a sequence of cells.

    Every method returns whether the session should continue.  Text
    written before any ``start_*`` call belongs to an implicit markdown
    cell.
    """

    async def start_code_cell(self) -> bool: ...

    async def start_markdown_cell(self) -> bool: ...

    async def write(self, data: str) -> bool: ...

    async def close(self) -> bool: ...
