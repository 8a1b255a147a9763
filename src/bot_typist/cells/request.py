"""Build the prompt sent to the LLM from the notebook cells so far."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

_HORIZONTAL_RULE_RE = re.compile(r"[-*_]{3,}")


@dataclass(frozen=True)
class CellError:
    name: str
    message: str
    stack: str


@dataclass(frozen=True)
class CellOutput:
    """One output of an executed code cell."""

    kind: Literal["text", "error"]
    text: str = ""
    error: CellError | None = None

    def prompt_text(self) -> str:
        # Tracebacks already name the exception.
        if self.kind == "error" and self.error is not None:
            return self.error.stack
        return self.text


@dataclass(frozen=True)
class Cell:
    language_id: str
    text: str
    outputs: tuple[CellOutput, ...] = field(default_factory=tuple)


def _is_horizontal_rule(line: str) -> bool:
    return _HORIZONTAL_RULE_RE.fullmatch(line.strip()) is not None


def _split_at_last_rule(text: str) -> tuple[bool, str]:
    """Return whether *text* has a horizontal rule, and the text after the last one."""
    found = False
    kept: list[str] = []
    for line in text.split("\n"):
        if _is_horizontal_rule(line):
            found = True
            kept = []
            continue
        kept.append(line)
    return found, "\n".join(kept)


def _format_cell(cell: Cell, text: str) -> str:
    parts = [f"%{cell.language_id}\n{text}\n"]
    for output in cell.outputs:
        parts.append(f"%output\n{output.prompt_text()}\n")
    return "".join(parts)


def choose_bot_prompt(cells: Sequence[Cell], index: int) -> str:
    """Return the prompt for a reply to the cell at *index*.

    Cells ``0..index`` are sent in order, each introduced by a
    ``%<language>`` line and followed by its outputs.  Blank cells are
    skipped.  A horizontal rule in a markdown cell starts a new
    conversation: everything before it is left out of the prompt.
    """
    if not 0 <= index < len(cells):
        msg = f"cell index {index} out of range (0..{len(cells) - 1})"
        raise IndexError(msg)

    prompt = ""
    for cell in cells[: index + 1]:
        if not cell.text.strip():
            continue
        if cell.language_id != "markdown":
            prompt += _format_cell(cell, cell.text)
            continue

        reset, text = _split_at_last_rule(cell.text)
        if reset:
            prompt = ""
        if text.strip():
            prompt += _format_cell(cell, text)

    return prompt


_SYSTEM_PROMPT_INTRO = (
    "You are a helpful AI assistant that's participating in a conversation "
    "in a Jupyter notebook."
)

_LANGUAGE_NAMES = {"python": "Python", "typescript": "TypeScript"}


def default_system_prompt(language: str) -> str:
    """Return the default system prompt for notebooks in *language*."""
    name = _LANGUAGE_NAMES.get(language)
    if name is None:
        return f"{_SYSTEM_PROMPT_INTRO}\n\nYou can see any cells from the conversation so far."

    prompt = (
        f"{_SYSTEM_PROMPT_INTRO}\n\n"
        f"You can see any Markdown and {name} cells from the conversation so far, "
        f"indicated by #markdown and #{language}. If the user executed a {name} "
        "cell, each cell output will follow it, indicated by #output.\n\n"
        f"You can reply using Markdown. {name} code blocks should contain real "
        f"{name} code that will run without errors. They will be converted into "
        f"{name} cells and executed when the user chooses."
    )
    if language == "python":
        prompt += (
            "\n\nTo display an image, write Python code that evaluates to an "
            "image object. The image will appear as a cell output."
        )
    return prompt
