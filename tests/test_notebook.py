"""Tests for reading .ipynb notebooks."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from bot_typist.cells.notebook import NotebookError, load_cells, parse_cells
from bot_typist.cells.request import Cell, CellOutput


def _notebook(*cells: dict[str, Any], language: str = "python") -> dict[str, Any]:
    return {
        "cells": list(cells),
        "metadata": {"language_info": {"name": language}},
        "nbformat": 4,
        "nbformat_minor": 5,
    }


class TestParseCells:
    """Converting notebook JSON into cells."""

    def test_markdown_and_code(self) -> None:
        nb = _notebook(
            {"cell_type": "markdown", "source": ["# Title\n", "text"]},
            {"cell_type": "code", "source": "x = 1", "outputs": []},
        )
        assert parse_cells(nb) == [
            Cell(language_id="markdown", text="# Title\ntext"),
            Cell(language_id="python", text="x = 1"),
        ]

    def test_outputs(self) -> None:
        nb = _notebook(
            {
                "cell_type": "code",
                "source": "print(1); 2",
                "outputs": [
                    {"output_type": "stream", "name": "stdout", "text": ["1\n"]},
                    {"output_type": "execute_result", "data": {"text/plain": ["2"]}},
                    {"output_type": "display_data", "data": {"image/png": "..."}},
                ],
            },
        )
        (cell,) = parse_cells(nb)
        assert cell.outputs == (
            CellOutput(kind="text", text="1\n"),
            CellOutput(kind="text", text="2"),
        )

    def test_error_output(self) -> None:
        nb = _notebook(
            {
                "cell_type": "code",
                "source": "1/0",
                "outputs": [
                    {
                        "output_type": "error",
                        "ename": "ZeroDivisionError",
                        "evalue": "division by zero",
                        "traceback": ["Traceback", "ZeroDivisionError: division by zero"],
                    }
                ],
            },
        )
        (cell,) = parse_cells(nb)
        (output,) = cell.outputs
        assert output.kind == "error"
        assert output.error is not None
        assert output.error.name == "ZeroDivisionError"
        assert output.prompt_text() == "Traceback\nZeroDivisionError: division by zero"

    def test_raw_cells_are_skipped(self) -> None:
        nb = _notebook({"cell_type": "raw", "source": "x"})
        assert parse_cells(nb) == []

    def test_language_from_kernelspec(self) -> None:
        nb = {
            "cells": [{"cell_type": "code", "source": "let x = 1;"}],
            "metadata": {"kernelspec": {"language": "typescript"}},
        }
        assert parse_cells(nb)[0].language_id == "typescript"

    def test_language_defaults_to_python(self) -> None:
        nb = {"cells": [{"cell_type": "code", "source": "x"}]}
        assert parse_cells(nb)[0].language_id == "python"

    def test_missing_cells(self) -> None:
        with pytest.raises(NotebookError, match="no 'cells' list"):
            parse_cells({"metadata": {}})


class TestLoadCells:
    """Reading notebook files."""

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "chat.ipynb"
        path.write_text(json.dumps(_notebook({"cell_type": "markdown", "source": "hi"})))
        assert load_cells(path) == [Cell(language_id="markdown", text="hi")]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(NotebookError, match="Cannot read notebook"):
            load_cells(tmp_path / "missing.ipynb")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.ipynb"
        path.write_text("{not json")
        with pytest.raises(NotebookError, match="Invalid JSON in bad.ipynb"):
            load_cells(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.ipynb"
        path.write_text("[]")
        with pytest.raises(NotebookError, match="got list"):
            load_cells(path)
