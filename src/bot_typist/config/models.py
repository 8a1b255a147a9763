"""Pydantic v2 models for bot-typist.yaml configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bot_typist.cells.request import default_system_prompt
from bot_typist.constants import DEFAULT_CUE, DEFAULT_LLM_PATH, DEFAULT_STOP


class LLMConfig(BaseModel):
    """How to run the ``llm`` command."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(
        default=DEFAULT_LLM_PATH,
        description="Path to the llm command",
    )
    system_prompt: str | None = Field(
        default=None,
        description="System prompt sent with --system (language default when unset)",
    )
    model: str = Field(
        default="",
        description="Model name passed with --model (llm's default when empty)",
    )
    stop: str = Field(
        default=DEFAULT_STOP,
        description="If the bot writes this string, its response is cut off",
    )
    extra_arguments: list[str] = Field(
        default_factory=list,
        description="Any additional arguments to pass to llm",
    )


class BotTypistConfig(BaseModel):
    """Top-level bot-typist.yaml configuration."""

    model_config = ConfigDict(extra="forbid")

    cue: str = Field(
        default=DEFAULT_CUE,
        description="Label added before the bot's reply in each markdown cell",
    )
    language: Literal["python", "typescript"] = Field(
        default="python",
        description="Language of the notebook's code cells",
    )
    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="llm command settings",
    )

    @model_validator(mode="after")
    def _fill_system_prompt(self) -> BotTypistConfig:
        if self.llm.system_prompt is None:
            self.llm.system_prompt = default_system_prompt(self.language)
        return self

    @model_validator(mode="after")
    def _validate_cue(self) -> BotTypistConfig:
        if "\n" in self.cue or ":" in self.cue:
            msg = f"Invalid cue {self.cue!r}: must not contain ':' or newlines"
            raise ValueError(msg)
        return self
