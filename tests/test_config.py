from __future__ import annotations

import json
from pathlib import Path

from ccbrowse import config


def test_defaults_without_settings_file(tmp_path, monkeypatch):
    monkeypatch.delenv(config.CLAUDE_DIR_ENV, raising=False)
    settings = config.load_settings(tmp_path)
    assert settings == config.DEFAULTS
    assert config.claude_dir(settings) == Path("~/.claude").expanduser()


def test_loaded_settings_do_not_alias_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(config.CLAUDE_DIR_ENV, raising=False)
    settings = config.load_settings(tmp_path)
    settings["messages"]["limit"] = 1
    settings["changelog"]["url"] = "https://example.com/other.md"
    assert config.DEFAULTS["messages"]["limit"] == 50
    assert config.load_settings(tmp_path)["changelog"]["url"].startswith("https://raw.githubusercontent.com/")


def test_settings_file_is_deep_merged(tmp_path, monkeypatch):
    monkeypatch.delenv(config.CLAUDE_DIR_ENV, raising=False)
    (tmp_path / config.SETTINGS_FILE).write_text(
        json.dumps({"messages": {"limit": 5}, "changelog": {"timeout": 3}}), encoding="utf-8"
    )
    settings = config.load_settings(tmp_path)
    assert settings["messages"]["limit"] == 5
    assert settings["messages"]["maxProjects"] == 5
    assert settings["changelog"]["timeout"] == 3
    assert settings["changelog"]["url"] == config.DEFAULTS["changelog"]["url"]
    assert config.DEFAULTS["messages"]["limit"] == 50


def test_malformed_settings_fall_back_to_defaults(tmp_path, monkeypatch, caplog):
    monkeypatch.delenv(config.CLAUDE_DIR_ENV, raising=False)
    (tmp_path / config.SETTINGS_FILE).write_text("{broken", encoding="utf-8")
    assert config.load_settings(tmp_path) == config.DEFAULTS
    assert "Ignoring unreadable settings file" in caplog.text

    (tmp_path / config.SETTINGS_FILE).write_text("[1, 2]", encoding="utf-8")
    assert config.load_settings(tmp_path) == config.DEFAULTS


def test_environment_overrides_claude_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(config.CLAUDE_DIR_ENV, str(tmp_path / "claude"))
    assert config.claude_dir(config.load_settings(tmp_path)) == tmp_path / "claude"
