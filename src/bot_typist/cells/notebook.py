"""Read the cells of a Jupyter notebook (.ipynb) for prompt building."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from bot_typist.cells.request import Cell, CellError, CellOutput


class NotebookError(Exception):
    """User-facing error reading a notebook file."""


def _join_source(source: object) -> str:
    if isinstance(source, list):
        return "".join(str(s) for s in source)
    return str(source or "")


def _convert_output(raw: dict[str, Any]) -> CellOutput | None:
    output_type = raw.get("output_type")

    if output_type == "stream":
        return CellOutput(kind="text", text=_join_source(raw.get("text")))

    if output_type in ("execute_result", "display_data"):
        data = raw.get("data")
        if isinstance(data, dict) and "text/plain" in data:
            return CellOutput(kind="text", text=_join_source(data["text/plain"]))
        return None

    if output_type == "error":
        name = str(raw.get("ename", ""))
        message = str(raw.get("evalue", ""))
        traceback = raw.get("traceback")
        stack = "\n".join(traceback) if isinstance(traceback, list) else f"{name}: {message}"
        return CellOutput(
            kind="error",
            error=CellError(name=name, message=message, stack=stack),
        )

    return None


def _notebook_language(notebook: dict[str, Any]) -> str:
    metadata = notebook.get("metadata")
    if isinstance(metadata, dict):
        info = metadata.get("language_info")
        if isinstance(info, dict) and isinstance(info.get("name"), str):
            return info["name"]
        kernel = metadata.get("kernelspec")
        if isinstance(kernel, dict) and isinstance(kernel.get("language"), str):
            return kernel["language"]
    return "python"


def parse_cells(notebook: dict[str, Any]) -> list[Cell]:
    """Convert a decoded notebook document into ``Cell`` objects.

    Raw cells are skipped.  Code cells take the notebook's language.
    """
    raw_cells = notebook.get("cells")
    if not isinstance(raw_cells, list):
        msg = "Notebook has no 'cells' list"
        raise NotebookError(msg)

    language = _notebook_language(notebook)
    cells: list[Cell] = []
    for raw in raw_cells:
        if not isinstance(raw, dict):
            continue
        cell_type = raw.get("cell_type")
        if cell_type == "markdown":
            cells.append(Cell(language_id="markdown", text=_join_source(raw.get("source"))))
        elif cell_type == "code":
            outputs = [
                converted
                for out in raw.get("outputs") or []
                if isinstance(out, dict) and (converted := _convert_output(out)) is not None
            ]
            cells.append(
                Cell(
                    language_id=language,
                    text=_join_source(raw.get("source")),
                    outputs=tuple(outputs),
                )
            )
    return cells


def load_cells(path: Path) -> list[Cell]:
    """Read *path* and return its cells."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read notebook: {exc}"
        raise NotebookError(msg) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path.name} (line {exc.lineno}, column {exc.colno})"
        raise NotebookError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {path.name}, got {type(data).__name__}"
        raise NotebookError(msg)

    return parse_cells(data)
