"""Tests for building the prompt from notebook cells."""

from __future__ import annotations

import pytest

from bot_typist.cells.request import (
    Cell,
    CellError,
    CellOutput,
    choose_bot_prompt,
    default_system_prompt,
)


def _md(text: str) -> Cell:
    return Cell(language_id="markdown", text=text)


def _py(text: str, *outputs: CellOutput) -> Cell:
    return Cell(language_id="python", text=text, outputs=outputs)


class TestChooseBotPrompt:
    """Which cells end up in the prompt."""

    def test_single_cell(self) -> None:
        assert choose_bot_prompt([_md("Hello")], 0) == "%markdown\nHello\n"

    def test_cells_up_to_index(self) -> None:
        cells = [_md("one"), _py("x = 1"), _md("three")]
        assert choose_bot_prompt(cells, 1) == "%markdown\none\n%python\nx = 1\n"

    def test_blank_cells_are_skipped(self) -> None:
        cells = [_md("one"), _md("  \n"), _py("")]
        assert choose_bot_prompt(cells, 2) == "%markdown\none\n"

    def test_text_output(self) -> None:
        cells = [_py("print(1)", CellOutput(kind="text", text="1\n"))]
        assert choose_bot_prompt(cells, 0) == "%python\nprint(1)\n%output\n1\n\n"

    def test_error_output_uses_stack(self) -> None:
        error = CellError(
            name="ZeroDivisionError",
            message="division by zero",
            stack="Traceback...\nZeroDivisionError: division by zero",
        )
        cells = [_py("1/0", CellOutput(kind="error", error=error))]
        assert choose_bot_prompt(cells, 0) == (
            "%python\n1/0\n%output\nTraceback...\nZeroDivisionError: division by zero\n"
        )

    def test_horizontal_rule_starts_new_conversation(self) -> None:
        cells = [_md("old"), _py("x = 1"), _md("---\nnew topic")]
        assert choose_bot_prompt(cells, 2) == "%markdown\nnew topic\n"

    def test_text_after_last_rule_is_kept(self) -> None:
        cells = [_md("a\n***\nb\n___\nc")]
        assert choose_bot_prompt(cells, 0) == "%markdown\nc\n"

    def test_rule_alone_resets(self) -> None:
        cells = [_md("old"), _md("-----"), _py("x = 2")]
        assert choose_bot_prompt(cells, 2) == "%python\nx = 2\n"

    def test_rule_in_code_cell_is_code(self) -> None:
        cells = [_md("hi"), _py("---")]
        assert choose_bot_prompt(cells, 1) == "%markdown\nhi\n%python\n---\n"

    def test_two_dashes_are_not_a_rule(self) -> None:
        cells = [_md("a"), _md("--\nb")]
        assert choose_bot_prompt(cells, 1) == "%markdown\na\n%markdown\n--\nb\n"

    def test_index_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            choose_bot_prompt([_md("a")], 1)
        with pytest.raises(IndexError):
            choose_bot_prompt([_md("a")], -1)


class TestDefaultSystemPrompt:
    def test_python(self) -> None:
        prompt = default_system_prompt("python")
        assert "indicated by #markdown and #python" in prompt
        assert "image" in prompt

    def test_typescript(self) -> None:
        prompt = default_system_prompt("typescript")
        assert "TypeScript code blocks" in prompt
        assert "image" not in prompt

    def test_unknown_language(self) -> None:
        assert "Jupyter notebook" in default_system_prompt("julia")
