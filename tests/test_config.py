"""Tests for configuration system."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from stocksplits.config import (
    DataConfig,
    IndexConfig,
    LoggingConfig,
    StockSplitsConfig,
    SymbolMetadataPolicy,
    load_config,
)
from stocksplits.errors import ConfigError, ErrorCode


class TestDataConfig:
    """Tests for DataConfig."""

    def test_defaults(self) -> None:
        config = DataConfig()
        assert config.data_dir == Path("./data")
        assert config.schema_dir is None
        assert config.index_path == Path("./data/index.json")

    def test_index_filename_must_not_look_like_year_file(self) -> None:
        """Test that a year-shaped index name is rejected."""
        with pytest.raises(ValueError, match="non-year"):
            DataConfig(index_filename="2024.json")

    def test_index_filename_must_be_json(self) -> None:
        with pytest.raises(ValueError, match="non-year"):
            DataConfig(index_filename="index.yaml")

    def test_frozen(self) -> None:
        """Test that configuration is immutable."""
        config = DataConfig()
        with pytest.raises(ValidationError):
            config.index_filename = "other.json"  # type: ignore[misc]


class TestIndexConfig:
    """Tests for IndexConfig."""

    def test_defaults(self) -> None:
        config = IndexConfig()
        assert config.version == "1.0.0"
        assert config.symbol_metadata is SymbolMetadataPolicy.FIRST_SEEN

    def test_policy_from_string(self) -> None:
        assert IndexConfig(symbol_metadata="last").symbol_metadata is SymbolMetadataPolicy.LAST_SEEN

    def test_invalid_version(self) -> None:
        with pytest.raises(ValueError):
            IndexConfig(version="v1")


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            LoggingConfig(level="LOUD")


class TestConfigLoader:
    """Tests for configuration loading."""

    def test_no_path_gives_defaults(self) -> None:
        assert load_config() == StockSplitsConfig()

    def test_load_yaml(self, temp_data_dir: Path) -> None:
        """Test loading a complete YAML configuration."""
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text(
            """
data:
  data_dir: /srv/splits/data
  index_filename: lookup.json
index:
  version: 1.2.0
  symbol_metadata: last
ingest:
  source: feed
  default_exchange: NYSE
logging:
  level: warning
  json_output: true
""",
            encoding="utf-8",
        )
        config = load_config(config_path)

        assert config.data_dir == Path("/srv/splits/data")
        assert config.index_path == Path("/srv/splits/data/lookup.json")
        assert config.index.version == "1.2.0"
        assert config.index.symbol_metadata is SymbolMetadataPolicy.LAST_SEEN
        assert config.ingest.source == "feed"
        assert config.ingest.default_exchange == "NYSE"
        assert config.logging.level == "WARNING"
        assert config.logging.json_output is True

    def test_relative_paths_anchored_at_config(self, temp_data_dir: Path) -> None:
        """Test that relative data paths resolve against the config directory."""
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text("data:\n  data_dir: data\n  schema_dir: schema\n", encoding="utf-8")
        config = load_config(config_path)

        assert config.data_dir == temp_data_dir / "data"
        assert config.data.schema_dir == temp_data_dir / "schema"

    def test_env_var_interpolation(self, temp_data_dir: Path) -> None:
        """Test environment variable interpolation in config."""
        os.environ["STOCKSPLITS_TEST_SOURCE"] = "from-env"
        try:
            config_path = temp_data_dir / "config.yaml"
            config_path.write_text(
                "ingest:\n  source: ${STOCKSPLITS_TEST_SOURCE}\n"
                "logging:\n  level: ${STOCKSPLITS_TEST_UNSET:ERROR}\n",
                encoding="utf-8",
            )
            config = load_config(config_path)
            assert config.ingest.source == "from-env"
            assert config.logging.level == "ERROR"
        finally:
            del os.environ["STOCKSPLITS_TEST_SOURCE"]

    def test_base_config_inheritance(self, temp_data_dir: Path) -> None:
        """Test that base.yaml next to the config is merged underneath it."""
        (temp_data_dir / "base.yaml").write_text(
            "index:\n  version: 3.0.0\n  symbol_metadata: last\n", encoding="utf-8"
        )
        config_path = temp_data_dir / "ci.yaml"
        config_path.write_text("index:\n  version: 3.1.0\n", encoding="utf-8")
        config = load_config(config_path)

        assert config.index.version == "3.1.0"
        assert config.index.symbol_metadata is SymbolMetadataPolicy.LAST_SEEN

    def test_empty_file(self, temp_data_dir: Path) -> None:
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text("", encoding="utf-8")
        assert load_config(config_path) == StockSplitsConfig()

    def test_missing_file(self, temp_data_dir: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(temp_data_dir / "absent.yaml")

    def test_invalid_values(self, temp_data_dir: Path) -> None:
        """Test that validation errors surface as ConfigError."""
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text("index:\n  symbol_metadata: random\n", encoding="utf-8")

        with pytest.raises(ConfigError) as excinfo:
            load_config(config_path)
        assert excinfo.value.code is ErrorCode.CONFIG_INVALID

    def test_not_a_mapping(self, temp_data_dir: Path) -> None:
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path)

    def test_invalid_yaml(self, temp_data_dir: Path) -> None:
        config_path = temp_data_dir / "config.yaml"
        config_path.write_text("data: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_path)
