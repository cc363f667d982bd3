"""Configuration management for thor."""

from thor.core.config.loader import load_config, load_thor_config
from thor.core.config.models import ColourConfig, HammerConfig, LoggingConfig, ThorConfig

__all__ = [
    # Loaders
    "load_config",
    "load_thor_config",
    # Models
    "ThorConfig",
    "ColourConfig",
    "HammerConfig",
    "LoggingConfig",
]
