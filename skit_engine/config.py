"""Engine configuration (LLM connection, script generation settings).

Resolution order, later wins:
  1. Model defaults.
  2. An optional JSON file (``SKIT_CONFIG`` or the path passed in).
  3. ``SKIT_*`` environment variables, after ``.env`` has been loaded.

Unknown keys anywhere in the file are rejected.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skit_engine.llm import HttpLLM, PromptSpec, ProviderFormat

logger = logging.getLogger(__name__)

# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SKIT_PROVIDER_URL": ("connection", "provider_url"),
    "SKIT_API_KEY": ("connection", "api_key"),
    "SKIT_PROVIDER_FORMAT": ("connection", "provider_format"),
    "SKIT_MODEL": ("connection", "model"),
    "SKIT_MAX_ATTEMPTS": ("script", "max_attempts"),
}


class ConfigError(ValueError):
    """Raised when configuration cannot be read or fails validation."""


class LLMConnection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    provider_url: str = "http://localhost:5001"
    api_key: str = ""
    provider_format: ProviderFormat = "koboldcpp"
    model: str = ""
    timeout: float = 120.0


class ScriptSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=3, ge=1)
    min_tokens: int | None = 10
    max_tokens: int = 400
    stop: list[str] = Field(default_factory=list)
    include_history: bool = True

    def prompt(self, text: str) -> PromptSpec:
        """A PromptSpec for ``text`` carrying these settings."""
        return PromptSpec(
            prompt=text,
            stop=list(self.stop),
            min_tokens=self.min_tokens,
            max_tokens=self.max_tokens,
            include_history=self.include_history,
        )


class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    connection: LLMConnection = Field(default_factory=LLMConnection)
    script: ScriptSettings = Field(default_factory=ScriptSettings)


def _read_file(path: Path) -> dict[str, Any]:
    try:
        stored = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(stored, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return stored


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Build an EngineConfig from defaults, an optional file and the environment."""
    load_dotenv()

    data: dict[str, Any] = {"connection": {}, "script": {}}
    if path is None and os.getenv("SKIT_CONFIG"):
        path = os.environ["SKIT_CONFIG"]
    if path is not None:
        stored = _read_file(Path(path))
        for section, values in stored.items():
            if section in data and isinstance(values, dict):
                data[section].update(values)
            else:
                data[section] = values
        logger.debug("Loaded config from %s", path)

    for var, (section, field) in _ENV_OVERRIDES.items():
        value = os.getenv(var)
        if value is not None and isinstance(data.get(section), dict):
            data[section][field] = value

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def build_llm(config: EngineConfig) -> HttpLLM:
    conn = config.connection
    return HttpLLM(
        provider_url=conn.provider_url,
        api_key=conn.api_key,
        provider_format=conn.provider_format,
        model=conn.model,
        timeout=conn.timeout,
    )
