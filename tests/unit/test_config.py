"""Unit tests for plugin config discovery and loading."""

import json
import sys
from pathlib import Path

import pytest

from rate_limit_fallback.config import (
    CONFIG_FILENAME,
    DEFAULT_COOLDOWN_MS,
    DEFAULT_FALLBACK_MODEL,
    DEFAULT_PATTERNS,
    FallbackConfig,
    find_config_file,
    get_config_dir,
    load_config,
)
from rate_limit_fallback.models.fallback_models import FallbackModelSpec


def _write(path: Path, content) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
    return path


class TestFallbackConfig:

    def test_defaults(self):
        config = FallbackConfig()

        assert config.enabled is True
        assert config.cooldown_ms == DEFAULT_COOLDOWN_MS
        assert config.patterns == DEFAULT_PATTERNS
        assert config.logging_enabled is False
        assert config.fallback_models == [FallbackModelSpec.parse(DEFAULT_FALLBACK_MODEL)]

    def test_json_keys(self):
        config = FallbackConfig.model_validate(
            {
                "enabled": False,
                "fallbackModel": "acme/small",
                "cooldownMs": 1000,
                "patterns": ["slow down"],
                "logging": True,
            }
        )

        assert config.enabled is False
        assert config.fallback_models == [FallbackModelSpec.parse("acme/small")]
        assert config.cooldown_ms == 1000
        assert config.patterns == ["slow down"]
        assert config.logging_enabled is True

    def test_model_list_keeps_order(self):
        config = FallbackConfig.model_validate(
            {"fallbackModel": ["acme/small", {"providerID": "other", "modelID": "big"}]}
        )

        assert [str(m) for m in config.fallback_models] == ["acme/small", "other/big"]

    def test_empty_model_list_uses_default(self):
        config = FallbackConfig.model_validate({"fallbackModel": []})

        assert [str(m) for m in config.fallback_models] == [DEFAULT_FALLBACK_MODEL]

    def test_explicit_nulls_use_defaults(self):
        config = FallbackConfig.model_validate({"cooldownMs": None, "patterns": None, "enabled": None})

        assert config.cooldown_ms == DEFAULT_COOLDOWN_MS
        assert config.patterns == DEFAULT_PATTERNS
        assert config.enabled is True

    def test_partial_config_merges_with_defaults(self):
        config = FallbackConfig.model_validate({"cooldownMs": 5})

        assert config.cooldown_ms == 5
        assert config.patterns == DEFAULT_PATTERNS


class TestConfigDiscovery:

    def test_config_dir_uses_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_dir() == tmp_path / "opencode"

    def test_config_dir_defaults_to_home_config(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

        assert get_config_dir() == Path.home() / ".config" / "opencode"

    def test_config_dir_on_windows_uses_appdata(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("APPDATA", str(tmp_path))

        assert get_config_dir() == tmp_path / "opencode"

    def test_root_file_wins(self, tmp_path):
        root = _write(tmp_path / CONFIG_FILENAME, {})
        _write(tmp_path / "config" / CONFIG_FILENAME, {})

        assert find_config_file(tmp_path) == root

    @pytest.mark.parametrize("subdir", ["config", "plugins", "plugin"])
    def test_subdirectories_searched(self, tmp_path, subdir):
        path = _write(tmp_path / subdir / CONFIG_FILENAME, {})

        assert find_config_file(tmp_path) == path

    def test_subdirectory_order(self, tmp_path):
        _write(tmp_path / "plugin" / CONFIG_FILENAME, {})
        plugins = _write(tmp_path / "plugins" / CONFIG_FILENAME, {})

        assert find_config_file(tmp_path) == plugins

    def test_no_file(self, tmp_path):
        assert find_config_file(tmp_path) is None

    def test_load_discovers_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        _write(tmp_path / "opencode" / "plugins" / CONFIG_FILENAME, {"cooldownMs": 42})

        assert load_config().cooldown_ms == 42


class TestLoadConfig:

    def test_load_explicit_path(self, tmp_path):
        path = _write(tmp_path / "custom.json", {"patterns": ["busy"], "logging": True})

        config = load_config(path)

        assert config.patterns == ["busy"]
        assert config.logging_enabled is True

    def test_missing_file_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.json") == FallbackConfig()

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[1, 2, 3]",
            '"just a string"',
            '{"cooldownMs": -1}',
            '{"cooldownMs": "soon"}',
            '{"patterns": "rate limit"}',
        ],
    )
    def test_invalid_file_returns_defaults(self, tmp_path, content):
        """Unparseable or invalid config never raises."""
        path = _write(tmp_path / CONFIG_FILENAME, content)

        assert load_config(path) == FallbackConfig()

    def test_load_without_discovered_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert load_config() == FallbackConfig()
