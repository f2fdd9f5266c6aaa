"""Configuration management for TransitionKit."""

from transitionkit.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from transitionkit.core.config.models import (
    AppConfig,
    ConfigBase,
    EngineConfig,
    KeyframeLabels,
    LoggingConfig,
)

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_app_config",
    "configure_logging",
    # Models
    "AppConfig",
    "ConfigBase",
    "EngineConfig",
    "KeyframeLabels",
    "LoggingConfig",
]
