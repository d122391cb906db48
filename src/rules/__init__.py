"""Configuration and classification rules for asmdeps."""

from rules.classifier import SystemResolver
from rules.config import (
    ConfigError,
    DepsConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "DepsConfig",
    "SystemResolver",
    "load_config",
]
