"""Root CLI group and version flag."""

import click

from bot_typist import __version__
from bot_typist.commands.ask import ask
from bot_typist.commands.check import check
from bot_typist.commands.init import init
from bot_typist.commands.prompt import prompt
from bot_typist.commands.reply import reply


@click.group()
@click.version_option(version=__version__, prog_name="bot-typist")
def cli() -> None:
    """bot-typist — ask an LLM about a Jupyter notebook and get the reply as cells."""


cli.add_command(init)
cli.add_command(check)
cli.add_command(ask)
cli.add_command(prompt)
cli.add_command(reply)
