from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from mystat.app.config import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    ClientSettings,
    load_config,
    load_settings,
)


def test_defaults_without_file_or_environment() -> None:
    settings = load_settings(environ={})
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.language == DEFAULT_LANGUAGE
    assert settings.timeout_seconds == 30.0
    assert settings.expiry_margin_seconds == 0.0


def test_base_url_always_ends_with_slash() -> None:
    assert ClientSettings(base_url="https://example.test/api/v2").base_url == (
        "https://example.test/api/v2/"
    )
    assert ClientSettings(base_url="https://example.test/api/v2//").base_url == (
        "https://example.test/api/v2/"
    )


def test_precedence_file_environment_overrides(tmp_path: Path) -> None:
    config_file = tmp_path / "mystat.json"
    config_file.write_text(
        json.dumps({"language": "en_US", "timeout_seconds": 10, "expiry_margin_seconds": 5}),
        encoding="utf-8",
    )
    environ = {"MYSTAT_LANGUAGE": "uk_UA", "MYSTAT_TIMEOUT_SECONDS": "12.5"}

    settings = load_settings(config_file, environ=environ, timeout_seconds=3, language=None)

    assert settings.language == "uk_UA"
    assert settings.timeout_seconds == 3
    assert settings.expiry_margin_seconds == 5


def test_config_path_from_environment(tmp_path: Path) -> None:
    config_file = tmp_path / "cfg.json"
    config_file.write_text(json.dumps({"language": "en_US"}), encoding="utf-8")

    settings = load_settings(environ={"MYSTAT_CONFIG": str(config_file)})

    assert settings.language == "en_US"


def test_unknown_keys_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / "bad.json"
    config_file.write_text(json.dumps({"langauge": "en_US"}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(config_file, environ={})


def test_invalid_timeout_rejected() -> None:
    with pytest.raises(ValidationError):
        load_settings(environ={"MYSTAT_TIMEOUT_SECONDS": "-1"})


def test_load_config_requires_object(tmp_path: Path) -> None:
    config_file = tmp_path / "list.json"
    config_file.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        load_config(config_file)
