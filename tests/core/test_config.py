#!/usr/bin/env python3
"""Tests for the layered settings manager."""

import pytest
import yaml

from srcexport.core.config import ConfigError, ConfigManager, ConfigSource
from srcexport.core.constants import ErrorCode, ReadOnlyPolicy


@pytest.fixture
def settings_file(temp_dir):
    """Write a settings file."""
    path = temp_dir / "export.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "compute_hash": False,
                "output_read_only": None,
                "rules": [{"pattern": "*.log", "action": "exclude"}],
                "replacements": [{"search": "Acme", "replacement": "Contoso"}],
            }
        )
    )
    return path


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        sources = list(ConfigSource)
        for i in range(len(sources) - 1):
            assert sources[i].value < sources[i + 1].value


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self):
        """Test compiled defaults match Settings.default()."""
        config = ConfigManager(load_environment=False)

        assert config.get("compute_hash") is True
        assert config.get("keep_symbolic_links") is True
        assert config.get("missing", "fallback") == "fallback"

    def test_file_overrides_defaults(self, settings_file):
        """Test file values override defaults."""
        settings = ConfigManager(str(settings_file), load_environment=False).to_settings()

        assert not settings.compute_hash
        assert settings.remove_scm_binding
        assert settings.output_read_only is ReadOnlyPolicy.UNCHANGED

    def test_file_rules_replace_defaults(self, settings_file):
        """Test lists are replaced, not merged."""
        settings = ConfigManager(str(settings_file), load_environment=False).to_settings()

        assert [rule.pattern for rule in settings.rules] == ["*.log"]

    def test_missing_file(self, temp_dir):
        """Test missing settings file."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(str(temp_dir / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_yaml(self, temp_dir):
        """Test YAML syntax errors."""
        path = temp_dir / "bad.yaml"
        path.write_text("rules: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(str(path))
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_non_mapping_document(self, temp_dir):
        """Test documents that are not mappings."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            ConfigManager(str(path))

    def test_empty_file(self, temp_dir):
        """Test an empty file keeps the defaults."""
        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert ConfigManager(str(path), load_environment=False).to_settings().compute_hash

    def test_environment(self, monkeypatch):
        """Test SRCEXPORT_* variables override the file layer."""
        monkeypatch.setenv("SRCEXPORT_COMPUTE_HASH", "false")
        monkeypatch.setenv("SRCEXPORT_OUTPUT_READ_ONLY", "unchanged")
        monkeypatch.setenv("SRCEXPORT_RULES", "ignored")

        config = ConfigManager()

        assert config.get("compute_hash") is False
        assert config.get("output_read_only") is None
        assert config.get("rules") != "ignored"

    def test_cli_overrides_environment(self, monkeypatch):
        """Test CLI values win over the environment."""
        monkeypatch.setenv("SRCEXPORT_COMPUTE_HASH", "false")
        config = ConfigManager()
        config.set("compute_hash", True, ConfigSource.CLI_ARGS)

        assert config.to_settings().compute_hash

    def test_invalid_merged_settings(self):
        """Test validation errors become ConfigError."""
        config = ConfigManager(load_environment=False)
        config.set("compute_hash", "maybe")

        with pytest.raises(ConfigError):
            config.to_settings()

    def test_load_dict_and_clear(self):
        """Test runtime layer and clearing."""
        config = ConfigManager(load_environment=False)
        config.load_dict({"compute_hash": False})
        assert config.get("compute_hash") is False

        config.clear(ConfigSource.RUNTIME)
        assert config.get("compute_hash") is True

        config.set("compute_hash", False, ConfigSource.CLI_ARGS)
        config.clear()
        assert config.get("compute_hash") is True

    def test_dump(self, settings_file):
        """Test the merged settings render as YAML."""
        config = ConfigManager(str(settings_file), load_environment=False)
        dumped = yaml.safe_load(config.dump())

        assert dumped["compute_hash"] is False
        assert dumped["replacements"] == [{"search": "Acme", "replacement": "Contoso"}]
