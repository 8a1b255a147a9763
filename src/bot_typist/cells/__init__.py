"""Cell types, reply splitting, and prompt building."""

from bot_typist.cells.request import Cell, CellError, CellOutput, choose_bot_prompt
from bot_typist.cells.response import BotResponse
from bot_typist.cells.types import FENCE_STARTS, HEADER_LINES, CellType, CellWriter, HeaderLine

__all__ = [
    "FENCE_STARTS",
    "HEADER_LINES",
    "BotResponse",
    "Cell",
    "CellError",
    "CellOutput",
    "CellType",
    "CellWriter",
    "HeaderLine",
    "choose_bot_prompt",
]
