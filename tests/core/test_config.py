"""Tests for logfocus configuration loading."""

import pytest
from pathlib import Path

from logfocus.core.config import (
    CacheConfig,
    Config,
    ConfigError,
    ConfigLoader,
    LargeFileConfig,
)


class TestConfigLoader:
    """Tests for ConfigLoader.load() method."""

    def test_load_full_config(self, tmp_path):
        """Load a configuration file with every section."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('''
[cache]
max_entries = 4
ttl_seconds = 30

[large_file]
size_threshold = 2048
max_decoration_ranges = 50
decoration_match_ceiling = 100

[storage]
directory = "/tmp/logfocus-store"
''')

        config = ConfigLoader().load(config_file)

        assert config.cache.max_entries == 4
        assert config.cache.ttl_seconds == 30
        assert config.large_file.size_threshold == 2048
        assert config.large_file.max_decoration_ranges == 50
        assert config.large_file.decoration_match_ceiling == 100
        assert config.storage.directory == Path("/tmp/logfocus-store")

    def test_load_partial_config(self, tmp_path):
        """Missing keys fall back to defaults."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('[cache]\nmax_entries = 2\n')

        config = ConfigLoader().load(config_file)

        assert config.cache.max_entries == 2
        assert config.cache.ttl_seconds == 300
        assert config.large_file == LargeFileConfig()

    def test_load_empty_config(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('')

        config = ConfigLoader().load(config_file)

        assert config.cache == CacheConfig()
        assert config.large_file.size_threshold == 10 * 1024 * 1024

    def test_load_none_returns_defaults(self):
        config = ConfigLoader().load(None)

        assert config.cache.max_entries == 10
        assert config.cache.ttl_seconds == 300
        assert config.large_file.max_decoration_ranges == 500
        assert config.large_file.decoration_match_ceiling == 1000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader().load(tmp_path / "missing.toml")


class TestConfigErrors:
    """Tests for invalid configuration."""

    def test_invalid_toml_reports_line(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[cache]\nmax_entries = \n')

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(config_file)

        assert exc_info.value.path == config_file
        assert exc_info.value.line == 2
        assert str(config_file) in str(exc_info.value)

    @pytest.mark.parametrize("section,key,value", [
        ("cache", "max_entries", "0"),
        ("cache", "ttl_seconds", "-1"),
        ("large_file", "size_threshold", '"big"'),
        ("large_file", "max_decoration_ranges", "true"),
    ])
    def test_non_positive_limits_rejected(self, tmp_path, section, key, value):
        config_file = tmp_path / "config.toml"
        config_file.write_text(f'[{section}]\n{key} = {value}\n')

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load(config_file)

        assert key in str(exc_info.value)
        assert exc_info.value.path == config_file

    def test_from_dict_rejects_bad_value(self):
        with pytest.raises(ConfigError):
            Config.from_dict({"cache": {"max_entries": -3}})
