"""Load, validate, and resolve bot-typist.yaml configuration."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from bot_typist.config.models import BotTypistConfig

DEFAULT_CONFIG_NAME = "bot-typist.yaml"


class ConfigError(Exception):
    """User-facing configuration error."""


def load_config(path: Path | None = None) -> BotTypistConfig:
    """Load and validate a bot-typist.yaml file.

    Args:
        path: Explicit config file path. If None, looks for
              bot-typist.yaml in the current directory and falls
              back to the defaults when there is none.

    Returns:
        A validated BotTypistConfig instance.

    Raises:
        ConfigError: On missing file, bad YAML, or validation failure.
    """
    config_path = _resolve_path(path)
    if config_path is None:
        return BotTypistConfig()
    raw = _read_yaml(config_path)
    _load_env(config_path.parent)
    return _validate(raw)


def _resolve_path(path: Path | None) -> Path | None:
    if path is not None:
        resolved = Path(path)
        if not resolved.is_file():
            msg = f"Config file not found: {resolved}"
            raise ConfigError(msg)
        return resolved

    default = Path.cwd() / DEFAULT_CONFIG_NAME
    if not default.is_file():
        return None
    return default


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read config file: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        msg = f"Invalid YAML in {path.name}{where}"
        raise ConfigError(msg) from exc

    # An empty file means "all defaults".
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path.name}, got {type(data).__name__}"
        raise ConfigError(msg)
    return data


def _load_env(config_dir: Path) -> None:
    # API keys for the llm command.
    env_path = config_dir / ".env"
    if env_path.is_file():
        load_dotenv(env_path)


def _describe(err: Mapping[str, Any]) -> str:
    where = ".".join(str(part) for part in err["loc"])
    if err["type"] == "extra_forbidden":
        return f"unknown setting '{where}'"
    if err["type"] == "literal_error":
        return f"{where} must be {err['ctx']['expected']}"
    if err["type"] == "value_error":
        # Raised by a model validator, so there is no field location.
        return str(err["ctx"]["error"])
    return f"{where}: {err['msg']}" if where else err["msg"]


def _validate(raw: dict[str, Any]) -> BotTypistConfig:
    try:
        return BotTypistConfig.model_validate(raw)
    except ValidationError as exc:
        problems = "\n".join(f"  {_describe(err)}" for err in exc.errors())
        msg = f"Config validation failed:\n{problems}"
        raise ConfigError(msg) from exc
