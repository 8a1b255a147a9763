"""Options and error handling shared by the bot-typist commands."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import click

from bot_typist.cells.notebook import NotebookError
from bot_typist.config import BotTypistConfig, ConfigError, load_config
from bot_typist.llm.child import ChildExitError, SpawnError
from bot_typist.streams.base import Cancelled

R = TypeVar("R")

config_option = click.option(
    "-f", "--file", "config_file", type=click.Path(), help="Config file path."
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; debug level with ``--verbose``."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_or_exit(config_file: str | None) -> BotTypistConfig:
    try:
        return load_config(Path(config_file) if config_file else None)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc


def run_or_exit(coro: Coroutine[Any, Any, R]) -> R | None:
    """Run *coro* to completion, turning expected failures into exit codes.

    Returns None if the user cancelled the reply.
    """
    try:
        return asyncio.run(coro)
    except Cancelled:
        click.echo("(cancelled)", err=True)
        return None
    except (NotebookError, SpawnError, ChildExitError, ValueError, IndexError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
