"""bot-typist prompt — show the prompt that would be sent for a notebook cell."""

from __future__ import annotations

from pathlib import Path

import click

from bot_typist.cells.notebook import NotebookError, load_cells
from bot_typist.cells.request import Cell, choose_bot_prompt


def notebook_prompt(notebook: Path, cell: int | None) -> str:
    """Build the prompt for *cell* of *notebook* (the last cell when None).

    Raises:
        NotebookError: The notebook can't be read or has no cells.
        IndexError: *cell* is out of range.
    """
    cells: list[Cell] = load_cells(notebook)
    if not cells:
        msg = f"{notebook.name} has no cells"
        raise NotebookError(msg)
    index = len(cells) - 1 if cell is None else cell
    return choose_bot_prompt(cells, index)


@click.command()
@click.argument("notebook", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--cell", type=int, default=None, help="Cell index (default: last cell).")
def prompt(notebook: Path, cell: int | None) -> None:
    """Print the prompt built from NOTEBOOK up to a cell."""
    try:
        text = notebook_prompt(notebook, cell)
    except (NotebookError, IndexError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    click.echo(text, nl=False)
