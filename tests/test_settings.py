"""Tests for settings persistence and overrides."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest

from tabbridge.services.settings import Settings, SettingsStore


@pytest.fixture(autouse=True)
def _clear_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("TABBRIDGE_"):
            monkeypatch.delenv(name)


def test_defaults_match_plugin_host(tmp_path: Path) -> None:
    settings = SettingsStore(tmp_path / "missing.json").load()

    assert settings == Settings()
    assert settings.port == 3000
    assert settings.cors_origins == ["https://chat.openai.com"]
    assert "openai-conversation-id" in settings.cors_headers
    assert settings.text_source == "buffer"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    settings = Settings(port=4100, diff_dir=str(tmp_path / "diffs"), text_source="disk")

    path = store.save(settings)

    assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
    assert store.load() == settings


def test_load_ignores_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"port": 3100, "theme": "dark"}), encoding="utf-8")

    assert SettingsStore(path).load().port == 3100


def test_invalid_json_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        settings = SettingsStore(path).load()

    assert settings == Settings()
    assert "not valid JSON" in caplog.text


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TABBRIDGE_PORT", "3300")
    monkeypatch.setenv("TABBRIDGE_DEBUG_LOGGING", "yes")
    monkeypatch.setenv("TABBRIDGE_CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("TABBRIDGE_TEXT_SOURCE", "disk")

    settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.port == 3300
    assert settings.debug_logging is True
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.text_source == "disk"


def test_invalid_integer_override_is_skipped(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("TABBRIDGE_PORT", "eighty")

    with caplog.at_level(logging.WARNING):
        settings = SettingsStore(tmp_path / "settings.json").load()

    assert settings.port == 3000
    assert "TABBRIDGE_PORT" in caplog.text


def test_environment_wins_over_cli_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TABBRIDGE_HOST", "0.0.0.0")

    settings = SettingsStore(tmp_path / "settings.json").load(overrides={"host": "localhost", "port": 3200, "bogus": 1})

    assert settings.host == "0.0.0.0"
    assert settings.port == 3200
