"""
Option loading for render-redact.

Options can come from a YAML configuration file and from environment
variables; explicit overrides win over both, and the environment wins over
the file.

Environment Variables:
    RENDER_REDACT_TAG: Annotation key holding redaction directives (default: redact)
    RENDER_REDACT_REPLACEMENT: Placeholder for REPLACE fields (default: redacted)
    RENDER_REDACT_RECURSION: Placeholder for cycles (default: recursive)
    RENDER_REDACT_MASK_CHAR: Single masking character (default: #)
    RENDER_REDACT_MASK_LENGTH: Characters to mask, negative for all (default: 4)
    RENDER_REDACT_MASK_DIRECTION: "prefix" or "suffix" (default: prefix)

Configuration file (``~/.config/render-redact/config.yaml``):
    options:
      redact_tag: redact
      masking_length: 4
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from render_redact.protocol.types import ConfigurationError, RenderOptions, build_options

# Environment variable names
ENV_REDACT_TAG = "RENDER_REDACT_TAG"
ENV_REPLACEMENT = "RENDER_REDACT_REPLACEMENT"
ENV_RECURSION = "RENDER_REDACT_RECURSION"
ENV_MASK_CHAR = "RENDER_REDACT_MASK_CHAR"
ENV_MASK_LENGTH = "RENDER_REDACT_MASK_LENGTH"
ENV_MASK_DIRECTION = "RENDER_REDACT_MASK_DIRECTION"

_ENV_OPTIONS: dict[str, str] = {
    ENV_REDACT_TAG: "redact_tag",
    ENV_REPLACEMENT: "replacement_placeholder",
    ENV_RECURSION: "recursion_placeholder",
    ENV_MASK_CHAR: "masking_char",
    ENV_MASK_LENGTH: "masking_length",
    ENV_MASK_DIRECTION: "masking_direction",
}

# Options that can be set from text sources
FILE_OPTIONS = frozenset(_ENV_OPTIONS.values())

DEFAULT_CONFIG = """\
# render-redact configuration

# Defaults for every Marshaller built from this file and for the CLI
options:
  # Annotation key holding REMOVE / REPLACE / MASK directives
  redact_tag: redact
  replacement_placeholder: redacted
  recursion_placeholder: recursive
  masking_char: "#"
  # Negative masks the whole value
  masking_length: 4
  # prefix masks the leading characters, suffix the trailing ones
  masking_direction: prefix
"""


def get_config_file() -> Path:
    """Get the config file path. Computed at runtime for test compatibility."""
    return Path.home() / ".config" / "render-redact" / "config.yaml"


def options_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read option values from environment variables.

    Args:
        environ: Environment to read; defaults to ``os.environ``.

    Returns:
        Option name to value for every variable that is set and non-empty.

    Raises:
        ConfigurationError: If RENDER_REDACT_MASK_LENGTH is not an integer.
    """
    env = os.environ if environ is None else environ
    options: dict[str, Any] = {}
    for env_var, option in _ENV_OPTIONS.items():
        value = env.get(env_var)
        if value is None or value == "":
            continue
        if option == "masking_length":
            try:
                options[option] = int(value.strip())
            except ValueError as e:
                raise ConfigurationError(f"{env_var} must be an integer, got {value!r}") from e
        elif option == "masking_direction":
            options[option] = value.strip().lower()
        elif option == "masking_char":
            options[option] = value
        else:
            options[option] = value.strip()
    return options


def options_from_file(path: Path | None = None) -> dict[str, Any]:
    """Read the ``options`` section of a YAML configuration file.

    Args:
        path: Configuration file; defaults to :func:`get_config_file`.

    Returns:
        Option values from the file, or an empty dict when the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be parsed or names unknown options.
    """
    config_file = path or get_config_file()
    if not config_file.exists():
        return {}

    try:
        config = yaml.safe_load(config_file.read_text()) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationError(f"Cannot read configuration {config_file}: {e}") from e
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"Configuration {config_file} must be a mapping")

    options = config.get("options") or {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"'options' in {config_file} must be a mapping")
    unknown = sorted(set(options) - FILE_OPTIONS)
    if unknown:
        raise ConfigurationError(
            f"Unknown options in {config_file}: {', '.join(str(u) for u in unknown)}"
        )
    return dict(options)


def load_options(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> RenderOptions:
    """Build RenderOptions from the config file, the environment and overrides.

    Args:
        path: Configuration file; defaults to :func:`get_config_file`.
        environ: Environment to read; defaults to ``os.environ``.
        **overrides: Option values that take precedence over both sources.

    Returns:
        Validated RenderOptions.
    """
    merged = options_from_file(path)
    merged.update(options_from_env(environ))
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return build_options(merged)
