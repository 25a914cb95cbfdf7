"""
System configuration package.

Exports:
    - SystemConfig: Complete system configuration dataclass
    - AnalyticsConfig: Numeric conventions of the analytics engine
    - get_system_config: Get system config singleton
    - reload_system_config: Force reload system config
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from tradelytics.system.config import AnalyticsConfig, SystemConfig, get_system_config, reload_system_config
from tradelytics.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "AnalyticsConfig",
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
