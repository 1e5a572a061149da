"""
Configuration resolution and environment variable substitution.
"""

import os
import re
from collections.abc import Mapping
from typing import Any

_VAR_PATTERN = re.compile(r"\${([^}]+)}")


def resolve_config(config_data: dict[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """
    Resolve ``${VAR_NAME}`` placeholders in configuration values.

    Unknown variables are left untouched so validation can report them.

    Args:
        config_data: Configuration dictionary
        environ: Variable source (default: os.environ)

    Returns:
        Resolved configuration
    """
    return _resolve_value(config_data, os.environ if environ is None else environ)


def _resolve_value(value: Any, environ: Mapping[str, str]) -> Any:
    """Recursively resolve values in configuration."""
    if isinstance(value, dict):
        return {k: _resolve_value(v, environ) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_value(item, environ) for item in value]
    elif isinstance(value, str):
        return _VAR_PATTERN.sub(lambda m: environ.get(m.group(1), m.group(0)), value)
    else:
        return value
