"""
Unit tests for system/config.py - System configuration.

Tests:
- AnalyticsConfig: Numeric conventions of the analytics engine
- LoggingConfig: Logging section and conversion to log_system.LoggingConfig
- SystemConfig: Container with load(), _from_dict(), deep merge
- Singleton functions: get_system_config(), reload_system_config()
"""

from pathlib import Path

import pytest

from tradelytics.system import config as config_module
from tradelytics.system.config import (
    AnalyticsConfig,
    LoggingConfig,
    SystemConfig,
    _deep_merge,
    get_system_config,
    reload_system_config,
)


@pytest.fixture(autouse=True)
def reset_singleton():
    """Clear the cached system config around each test."""
    config_module._system_config = None
    yield
    config_module._system_config = None


class TestAnalyticsConfig:
    """Test AnalyticsConfig dataclass."""

    def test_create_with_defaults(self):
        """Test AnalyticsConfig uses correct defaults."""
        # Arrange & Act
        config = AnalyticsConfig()

        # Assert
        assert config.breakeven_band == 0.05
        assert config.r_precision == 2
        assert config.chart_cap == 50.0
        assert config.rolling_window == 20
        assert config.playbook_rolling_window == 10
        assert config.discipline_threshold == 9
        assert config.discipline_lookback == 3
        assert config.monthly_r_goal == 20.0

    def test_create_with_custom_values(self):
        """Test AnalyticsConfig accepts custom values."""
        # Arrange & Act
        config = AnalyticsConfig(breakeven_band=0.1, chart_cap=10.0, rolling_window=5)

        # Assert
        assert config.breakeven_band == 0.1
        assert config.chart_cap == 10.0
        assert config.rolling_window == 5

    def test_is_dataclass(self):
        """Test that AnalyticsConfig is a dataclass."""
        assert hasattr(AnalyticsConfig(), "__dataclass_fields__")


class TestLoggingConfig:
    """Test LoggingConfig dataclass."""

    def test_create_with_defaults(self):
        """Test LoggingConfig uses correct defaults."""
        # Arrange & Act
        config = LoggingConfig()

        # Assert
        assert config.level == "INFO"
        assert config.format == "console"
        assert config.timestamp_format == "compact"
        assert config.enable_file is False
        assert config.file_path == "logs/tradelytics.log"
        assert config.file_level == "WARNING"
        assert config.file_rotation is True
        assert config.max_file_size_mb == 10
        assert config.backup_count == 3

    def test_to_logger_config_converts_correctly(self):
        """Test to_logger_config() converts to log_system.LoggingConfig."""
        # Arrange
        config = LoggingConfig(level="DEBUG", format="json", file_path="logs/app.log")

        # Act
        logger_config = config.to_logger_config()

        # Assert
        assert logger_config.level == "DEBUG"
        assert logger_config.format == "json"
        assert logger_config.file_path == Path("logs/app.log")

    def test_to_logger_config_uses_default_file_path(self):
        """Test to_logger_config() uses default file_path when not specified."""
        # Arrange & Act
        logger_config = LoggingConfig().to_logger_config()

        # Assert
        assert logger_config.file_path == Path("logs/tradelytics.log")


class TestSystemConfig:
    """Test SystemConfig container."""

    def test_create_with_defaults(self):
        """Test SystemConfig creates with default sub-configs."""
        # Arrange & Act
        config = SystemConfig()

        # Assert
        assert isinstance(config.analytics, AnalyticsConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_load_missing_file_returns_defaults(self, tmp_path):
        """Test that a missing path yields defaults."""
        # Arrange & Act
        config = SystemConfig.load(tmp_path / "nope.yaml")

        # Assert
        assert config == SystemConfig()

    def test_load_partial_file_merges_over_defaults(self, tmp_path):
        """Test that only the given keys change."""
        # Arrange
        config_file = tmp_path / "tradelytics.yaml"
        config_file.write_text("analytics:\n  breakeven_band: 0.1\nlogging:\n  level: DEBUG\n")

        # Act
        config = SystemConfig.load(config_file)

        # Assert
        assert config.analytics.breakeven_band == 0.1
        assert config.analytics.chart_cap == 50.0
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"

    def test_load_empty_file_returns_defaults(self, tmp_path):
        # Arrange
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        # Act & Assert
        assert SystemConfig.load(config_file) == SystemConfig()

    def test_load_non_mapping_raises(self, tmp_path):
        # Arrange
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        # Act & Assert
        with pytest.raises(ValueError, match="must contain a mapping"):
            SystemConfig.load(config_file)

    def test_load_uses_cwd_file_when_no_path(self, tmp_path, monkeypatch):
        """Test ./tradelytics.yaml discovery."""
        # Arrange
        (tmp_path / "tradelytics.yaml").write_text("analytics:\n  rolling_window: 7\n")
        monkeypatch.chdir(tmp_path)

        # Act
        config = SystemConfig.load()

        # Assert
        assert config.analytics.rolling_window == 7

    def test_from_dict_with_missing_sections(self):
        # Arrange & Act
        config = SystemConfig._from_dict({"analytics": {"chart_cap": 25.0}})

        # Assert
        assert config.analytics.chart_cap == 25.0
        assert config.logging == LoggingConfig()

    def test_unknown_key_raises(self):
        """Test that typos in the config file are not silently ignored."""
        with pytest.raises(ValueError, match="Unknown key\\(s\\) in 'analytics' config section: breakeven_bnad"):
            SystemConfig._from_dict({"analytics": {"breakeven_bnad": 0.1}})

    def test_unknown_logging_key_raises(self):
        with pytest.raises(ValueError, match="'logging' config section: colour"):
            SystemConfig._from_dict({"logging": {"colour": True}})

    def test_unknown_section_raises(self):
        with pytest.raises(ValueError, match="Unknown config section\\(s\\): analytic"):
            SystemConfig._from_dict({"analytic": {"chart_cap": 10.0}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="'analytics' must be a mapping"):
            SystemConfig._from_dict({"analytics": ["chart_cap"]})

    def test_load_file_with_misspelled_key_raises_value_error(self, tmp_path):
        # Arrange
        config_file = tmp_path / "tradelytics.yaml"
        config_file.write_text("analytics:\n  chart_capp: 10\n")

        # Act & Assert
        with pytest.raises(ValueError, match="chart_capp"):
            SystemConfig.load(config_file)


class TestDeepMerge:
    """Test _deep_merge() helper."""

    def test_nested_override(self):
        # Arrange
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 20}}

        # Act
        result = _deep_merge(base, override)

        # Assert
        assert result == {"a": {"x": 1, "y": 20}, "b": 3}
        assert base["a"]["y"] == 2  # Base untouched

    def test_non_dict_replaces(self):
        assert _deep_merge({"a": {"x": 1}}, {"a": 5}) == {"a": 5}


class TestSingleton:
    """Test get_system_config() and reload_system_config()."""

    def test_get_returns_same_instance(self, tmp_path, monkeypatch):
        # Arrange
        monkeypatch.chdir(tmp_path)

        # Act
        first = get_system_config()
        second = get_system_config()

        # Assert
        assert first is second

    def test_reload_from_explicit_path(self, tmp_path, monkeypatch):
        # Arrange
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("analytics:\n  monthly_r_goal: 12.5\n")
        before = get_system_config()

        # Act
        after = reload_system_config(config_file)

        # Assert
        assert after is not before
        assert after.analytics.monthly_r_goal == 12.5
        assert get_system_config() is after
