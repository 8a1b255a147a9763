"""bot-typist check — verify that the configured llm command runs."""

from __future__ import annotations

import asyncio

import click

from bot_typist.commands.common import (
    config_option,
    configure_logging,
    load_or_exit,
    verbose_option,
)
from bot_typist.llm.service import Service


@click.command()
@config_option
@verbose_option
def check(config_file: str | None, verbose: bool) -> None:
    """Check that the llm command can be run."""
    configure_logging(verbose)
    config = load_or_exit(config_file)

    path = asyncio.run(Service(config.llm).check_command_path())
    if not path:
        click.echo(
            f"Error: can't run {config.llm.path!r}. "
            "Set llm.path in bot-typist.yaml, or rerun with -v for details.",
            err=True,
        )
        raise SystemExit(1)
    click.echo(f"llm command OK: {path}")
