"""bot-typist reply — ask the bot to reply to a notebook cell."""

from __future__ import annotations

from pathlib import Path

import click

from bot_typist.cells.notebook import NotebookError
from bot_typist.cells.types import CellType
from bot_typist.cells.writers import EchoCellWriter
from bot_typist.commands.common import (
    config_option,
    configure_logging,
    load_or_exit,
    run_or_exit,
    verbose_option,
)
from bot_typist.commands.prompt import notebook_prompt
from bot_typist.llm.service import Service


@click.command()
@click.argument("notebook", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--cell", type=int, default=None, help="Cell index (default: last cell).")
@config_option
@verbose_option
def reply(notebook: Path, cell: int | None, config_file: str | None, verbose: bool) -> None:
    """Print the bot's reply to NOTEBOOK, split into cells."""
    configure_logging(verbose)
    config = load_or_exit(config_file)

    try:
        text = notebook_prompt(notebook, cell)
    except (NotebookError, IndexError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not text.strip():
        click.echo("Error: nothing to reply to (the prompt is empty)", err=True)
        raise SystemExit(1)

    output = EchoCellWriter(code_type=CellType(config.language))
    run_or_exit(Service(config.llm).reply(text, output, cue=config.cue))
