"""
System configuration for Tradelytics.

One YAML file configures the whole toolkit. Every key is optional: a
partial file is deep-merged over the built-in defaults, and a missing or
empty file yields the defaults unchanged.

Lookup order for SystemConfig.load():
1. Explicit path argument
2. ./tradelytics.yaml in the current working directory
3. Built-in defaults

Example tradelytics.yaml:

    analytics:
      breakeven_band: 0.05
      chart_cap: 50.0
      rolling_window: 20

    logging:
      level: DEBUG
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, TypeVar

import yaml

from tradelytics.system.log_system import LoggingConfig as LoggerConfig

DEFAULT_CONFIG_FILENAME = "tradelytics.yaml"

_Section = TypeVar("_Section", "AnalyticsConfig", "LoggingConfig")


@dataclass
class AnalyticsConfig:
    """
    Numeric conventions used by the analytics engine.

    Attributes:
        breakeven_band: Half-width of the neutral R band around zero; trades inside it are Breakeven
        r_precision: Decimal places used when rounding R-multiples
        chart_cap: Finite stand-in for unbounded values in chart series (presentation only)
        rolling_window: Default window for account/dashboard rolling series
        playbook_rolling_window: Default window for per-playbook rolling series
        discipline_threshold: Minimum rule adherence score that counts as disciplined
        discipline_lookback: Number of most recent trades checked for a discipline streak
        monthly_r_goal: Default monthly R-multiple target
    """

    breakeven_band: float = 0.05
    r_precision: int = 2
    chart_cap: float = 50.0
    rolling_window: int = 20
    playbook_rolling_window: int = 10
    discipline_threshold: int = 9
    discipline_lookback: int = 3
    monthly_r_goal: float = 20.0


@dataclass
class LoggingConfig:
    """Logging section of the system file (converted to log_system.LoggingConfig)."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time", "short"] = "compact"
    enable_file: bool = False
    file_path: str = "logs/tradelytics.log"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the pydantic model consumed by LoggerFactory."""
        return LoggerConfig(
            level=self.level,
            format=self.format,
            timestamp_format=self.timestamp_format,
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Container for every configuration section."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, falling back to defaults.

        Args:
            path: Explicit config file. If None, ./tradelytics.yaml is used when present.

        Returns:
            SystemConfig with file values merged over defaults
        """
        if path is None:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
            path = candidate if candidate.exists() else None

        if path is None or not Path(path).exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}

        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(loaded).__name__}")

        defaults = asdict(cls())
        return cls._from_dict(_deep_merge(defaults, loaded))

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """
        Build config from a (possibly partial) dictionary.

        Raises:
            ValueError: If a section or key is unknown, or a section is not a mapping
        """
        unknown_sections = sorted(str(key) for key in set(data) - {f.name for f in fields(cls)})
        if unknown_sections:
            raise ValueError(f"Unknown config section(s): {', '.join(unknown_sections)}")

        return cls(
            analytics=_build_section(AnalyticsConfig, "analytics", data.get("analytics")),
            logging=_build_section(LoggingConfig, "logging", data.get("logging")),
        )


def _build_section(section_cls: type[_Section], name: str, values: Any) -> _Section:
    """Instantiate one config section, naming any key the dataclass does not define."""
    if values is None:
        return section_cls()
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(values).__name__}")

    unknown = sorted(str(key) for key in set(values) - {f.name for f in fields(section_cls)})
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}' config section: {', '.join(unknown)}")
    return section_cls(**values)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the process-wide config, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload (optionally from an explicit file)."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
