"""Runtime configuration read from a ``.env`` file and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PORT = "8080"


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be loaded."""


@dataclass(frozen=True)
class Config:
    """Settings the server needs to start."""

    port: str
    openai_key: str
    replicate_key: str


def _require(name: str) -> str:
    value = os.environ.get(name, "")
    if not value:
        raise ConfigError(f"{name} environment variable not set")
    return value


def load_config(dotenv_path: str | os.PathLike[str] | None = None) -> Config:
    """Load the ``.env`` file into the environment and build a :class:`Config`.

    The file must exist; variables already present in the environment are
    not overridden. Both API keys are required, the port defaults to 8080.
    """
    path = Path(dotenv_path) if dotenv_path is not None else Path.cwd() / ".env"
    if not path.is_file():
        raise ConfigError(f"cannot load {path}: no such file")
    load_dotenv(path, override=False)

    openai_key = _require("OPENAI_API_KEY")
    replicate_key = _require("REPLICATE_TOKEN")
    port = os.environ.get("PORT", "") or DEFAULT_PORT

    return Config(port=port, openai_key=openai_key, replicate_key=replicate_key)