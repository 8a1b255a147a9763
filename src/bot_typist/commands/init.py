"""bot-typist init — scaffold a bot-typist.yaml in the current directory."""

from __future__ import annotations

from pathlib import Path

import click

from bot_typist.config.parser import DEFAULT_CONFIG_NAME

TEMPLATE_YAML = """\
# bot-typist configuration
# Docs: https://github.com/skybrian/bot-typist

# Label written before the bot's reply in each markdown cell.
# Set to "" to leave replies unlabelled.
cue: "🤖"

# Language of the notebook's code cells: python or typescript.
language: python

llm:
  # Path to the llm command (https://llm.datasette.io).
  path: llm

  # Model name passed with --model. Empty means llm's default.
  model: ""

  # The reply is cut off if the bot writes this string.
  stop: "\\n%output\\n"

  # System prompt sent with --system. Leave unset for the default
  # prompt for the notebook's language.
  # system_prompt: |
  #   You are a helpful AI assistant.

  # Any additional arguments to pass to llm.
  extra_arguments: []
"""


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing bot-typist.yaml.")
def init(force: bool) -> None:
    """Scaffold a bot-typist.yaml in the current directory."""
    config_path = Path.cwd() / DEFAULT_CONFIG_NAME

    if config_path.exists() and not force:
        raise click.ClickException(
            f"{DEFAULT_CONFIG_NAME} already exists. Use --force to overwrite."
        )

    try:
        config_path.write_text(TEMPLATE_YAML, encoding="utf-8")
    except OSError as exc:
        raise click.ClickException(f"Cannot write {DEFAULT_CONFIG_NAME}: {exc}") from exc
    click.echo(f"  Created {DEFAULT_CONFIG_NAME}")

    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Install llm and set up a model: https://llm.datasette.io")
    click.echo(f"  2. Edit {DEFAULT_CONFIG_NAME} to choose the model and cue")
    click.echo("  3. Run `bot-typist check` to verify the llm command")
