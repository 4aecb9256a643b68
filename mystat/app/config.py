"""Configuration utilities for the MyStat client.

Settings come from, in increasing order of precedence: built-in defaults, an
optional JSON configuration file, ``MYSTAT_*`` environment variables and
explicit keyword overrides.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://msapi.itstep.org/api/v2/"
DEFAULT_APPLICATION_KEY = (
    "6a56a5df2667e65aab73ce76d1dd737f7d1faef9c52e8b8c55ac75f565d8e8a6"
)
DEFAULT_LANGUAGE = "ru_RU"
DEFAULT_TIMEOUT = 30.0

ENV_PREFIX = "MYSTAT_"
CONFIG_ENV_VAR = "MYSTAT_CONFIG"


class ClientSettings(BaseModel):
    """Connection settings shared by the login and request paths."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = DEFAULT_BASE_URL
    application_key: str = DEFAULT_APPLICATION_KEY
    language: str = DEFAULT_LANGUAGE
    timeout_seconds: float | None = Field(default=DEFAULT_TIMEOUT, gt=0)
    expiry_margin_seconds: float = Field(default=0.0, ge=0)

    @field_validator("base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        # httpx resolves relative paths against the last "/" of base_url
        return value.rstrip("/") + "/"


def load_config(path: Path | str) -> Dict[str, Any]:
    """Load a JSON configuration file and return it as a dictionary."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a JSON object")
    return data


def _from_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for name in ClientSettings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            values[name] = raw
    return values


def load_settings(
    config_path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ClientSettings:
    """Build :class:`ClientSettings` from file, environment and overrides.

    Args:
        config_path: JSON file to read. Falls back to the path named by
            ``MYSTAT_CONFIG``; no file is read when neither is set.
        environ: Environment mapping, ``os.environ`` when omitted.
        **overrides: Explicit values; ``None`` values are ignored.

    Raises:
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    path = config_path or env.get(CONFIG_ENV_VAR)
    if path is not None:
        values.update(load_config(path))

    values.update(_from_environment(env))
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ClientSettings.model_validate(values)


__all__ = [
    "ClientSettings",
    "DEFAULT_APPLICATION_KEY",
    "DEFAULT_BASE_URL",
    "DEFAULT_LANGUAGE",
    "DEFAULT_TIMEOUT",
    "load_config",
    "load_settings",
]
