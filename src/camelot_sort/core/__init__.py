"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML + .env)
- Logging (Loguru)
- Console management (Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

from .config import (
    Config,
    LoggingConfig,
    LookupConfig,
    ReferenceConfig,
    SpotifyConfig,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)
from .console import get_console, print_table
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "LoggingConfig",
    "LookupConfig",
    "ReferenceConfig",
    "SpotifyConfig",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    # Output
    "log",
    "setup_loguru",
    # Console
    "get_console",
    "print_table",
]
