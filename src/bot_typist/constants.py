"""Shared constants for the Bot Typist runtime."""

from __future__ import annotations

#: Label prefixed to the bot's reply in each markdown cell.
DEFAULT_CUE = "🤖"

#: Command used to talk to the language model.
DEFAULT_LLM_PATH = "llm"

#: If the bot writes this string, its response is cut off.
DEFAULT_STOP = "\n%output\n"

#: Written in place of a reply when the bot sends nothing.
NO_RESPONSE = "(no response)"

#: Seconds to wait for ``llm --version`` before giving up.
VERSION_PROBE_TIMEOUT = 2.0
