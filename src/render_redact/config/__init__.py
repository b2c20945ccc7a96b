"""Configuration module for render-redact."""

from render_redact.config.settings import (
    DEFAULT_CONFIG,
    get_config_file,
    load_options,
    options_from_env,
    options_from_file,
)

__all__ = [
    "DEFAULT_CONFIG",
    "get_config_file",
    "load_options",
    "options_from_env",
    "options_from_file",
]
