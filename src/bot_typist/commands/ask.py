"""bot-typist ask — send one prompt and print the reply as cells."""

from __future__ import annotations

import click

from bot_typist.cells.types import CellType
from bot_typist.cells.writers import EchoCellWriter
from bot_typist.commands.common import (
    config_option,
    configure_logging,
    load_or_exit,
    run_or_exit,
    verbose_option,
)
from bot_typist.llm.service import Service


@click.command()
@click.argument("prompt")
@config_option
@verbose_option
def ask(prompt: str, config_file: str | None, verbose: bool) -> None:
    """Ask the bot PROMPT and print its reply split into cells."""
    configure_logging(verbose)
    config = load_or_exit(config_file)

    output = EchoCellWriter(code_type=CellType(config.language))
    service = Service(config.llm)
    run_or_exit(service.reply(f"%markdown\n{prompt}\n", output, cue=config.cue))
