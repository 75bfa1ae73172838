"""
Unit tests for configuration models and the configuration parser.

Tests the YAML configuration parsing, validation, and error handling
functionality of the ConfigParser class and FindFilesConfig model.
"""

import pytest
import tempfile
import shutil
import os
import yaml
from pathlib import Path
from pydantic import ValidationError

from findfiles.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    create_config_template
)
from findfiles.models.config import FindFilesConfig, validate_config_dict
from findfiles.models.search_options import DisplayMode


class TestFindFilesConfig:
    """Test cases for the FindFilesConfig model."""

    def test_defaults(self):
        """Test default configuration values."""
        config = FindFilesConfig()

        assert config.search.sort == "p"
        assert config.search.use_regex is False
        assert config.display.mode is DisplayMode.TABLE
        assert config.display.fallback_width == 79
        assert config.display.min_width == 50
        assert config.execution.dry_run is False
        assert config.execution.fail_on_exit_code is False
        assert config.validate_configuration() == []

    def test_from_dict(self):
        """Test creating configuration from a dictionary."""
        config = FindFilesConfig.from_dict({
            'search': {'sort': 's-m', 'shallow': True},
            'display': {'mode': 'tab'},
        })

        assert config.search.sort == "s-m"
        assert config.search.shallow is True
        assert config.display.mode is DisplayMode.TAB

    def test_invalid_mode(self):
        """Test that unknown display modes are rejected."""
        with pytest.raises(ValidationError):
            FindFilesConfig.from_dict({'display': {'mode': 'fancy'}})

    def test_inconsistent_widths(self):
        """Test that the fallback width may not be below the minimum."""
        with pytest.raises(ValidationError, match="fallback_width"):
            FindFilesConfig.from_dict({'display': {'fallback_width': 40, 'min_width': 50}})

    def test_warnings(self):
        """Test warnings for settings without effect."""
        config = FindFilesConfig.from_dict({
            'display': {'mode': 'bare', 'group_by_directory': True, 'shared_headers': False},
        })

        warnings = config.validate_configuration()

        assert any("bare mode" in warning for warning in warnings)

    def test_to_dict_round_trip(self):
        """Test that to_dict output is accepted by from_dict."""
        config = FindFilesConfig.from_dict({'display': {'mode': 'bare'}})

        assert FindFilesConfig.from_dict(config.to_dict()) == config

    def test_validate_config_dict(self):
        """Test top-level section validation."""
        assert validate_config_dict({'search': {}, 'display': None}) == {'search': {}}

        with pytest.raises(ValueError, match="Unknown configuration section"):
            validate_config_dict({'roots': ['.']})

        with pytest.raises(ValueError, match="must be a mapping"):
            validate_config_dict({'search': ['p']})


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def setup_method(self):
        """Set up an empty search directory."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write(self, name: str, content: str) -> Path:
        path = self.temp_path / name
        path.write_text(content, encoding='utf-8')
        return path

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.findfiles.yaml',
            '.findfiles.yml',
            'findfiles.yaml',
            'findfiles.yml',
        ]

    def test_load_config_with_valid_file(self):
        """Test loading configuration from valid YAML file."""
        path = self._write("config.yaml", yaml.dump({
            'search': {'sort': '-s'},
            'execution': {'dry_run': True},
        }))

        result = ConfigParser().load_config(path)

        assert isinstance(result, ConfigParseResult)
        assert result.config.search.sort == "-s"
        assert result.config.execution.dry_run is True
        assert result.config_path == path
        assert result.is_default is False

    def test_load_config_file_not_found(self):
        """Test loading configuration from non-existent file."""
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigParser().load_config(self.temp_path / "missing.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading configuration with invalid YAML syntax."""
        path = self._write("bad.yaml", "search:\n  sort: [\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            ConfigParser().load_config(path)

    def test_load_config_empty_file(self):
        """Test that an empty file gives the defaults."""
        path = self._write("empty.yaml", "")

        result = ConfigParser().load_config(path)

        assert result.config == FindFilesConfig()
        assert result.is_default is False

    def test_load_config_non_dict_yaml(self):
        """Test loading configuration with non-dictionary YAML."""
        path = self._write("list.yaml", "- item1\n- item2")

        with pytest.raises(ConfigurationError, match="must contain a YAML object"):
            ConfigParser().load_config(path)

    def test_load_config_invalid_values(self):
        """Test that model validation failures become configuration errors."""
        path = self._write("values.yaml", "display:\n  mode: fancy\n")

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            ConfigParser().load_config(path)

    def test_load_config_unknown_section(self):
        """Test that unknown sections are rejected."""
        path = self._write("unknown.yaml", "vector_db:\n  backend: lancedb\n")

        with pytest.raises(ConfigurationError, match="Unknown configuration section"):
            ConfigParser().load_config(path)

    def test_discovery_in_search_paths(self):
        """Test finding a configuration file in the search paths."""
        self._write(".findfiles.yml", "search:\n  shallow: true\n")
        parser = ConfigParser(search_paths=[self.temp_path])

        result = parser.load_config()

        assert result.config.search.shallow is True
        assert result.config_path == self.temp_path / ".findfiles.yml"
        assert result.is_default is False

    def test_no_file_uses_defaults(self):
        """Test loading configuration without file uses defaults."""
        parser = ConfigParser(search_paths=[self.temp_path])

        result = parser.load_config()

        assert result.config == FindFilesConfig()
        assert result.config_path is None
        assert result.is_default is True
        assert any("No configuration file found" in w for w in result.warnings)

    def test_strict_mode(self):
        """Test that warnings are errors in strict mode."""
        parser = ConfigParser(strict_mode=True, search_paths=[self.temp_path])

        with pytest.raises(ConfigurationError, match="strict mode"):
            parser.load_config()

    def test_save_config(self):
        """Test saving and reloading a configuration."""
        config = FindFilesConfig.from_dict({'search': {'sort': 'n'}, 'display': {'mode': 'tab'}})
        path = self.temp_path / "nested" / "saved.yaml"

        ConfigParser().save_config(config, path)
        reloaded = load_config(path).config

        assert reloaded == config

    def test_create_config_template(self):
        """Test that the template is valid and commented."""
        path = self.temp_path / "template.yaml"

        create_config_template(path)
        content = path.read_text(encoding='utf-8')

        assert content.startswith("# FindFiles Configuration")
        assert "# Display preferences" in content
        assert load_config(path).config == FindFilesConfig()
