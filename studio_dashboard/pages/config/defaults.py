"""Configuration loader for page-specific settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

# Configuration directory
CONFIG_DIR = Path(__file__).parent


def load_config(config_name: str) -> Dict[str, Any]:
    """Load a configuration file by name.

    Args:
        config_name: Name of the config file (without .json extension)

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        json.JSONDecodeError: If the configuration file is invalid JSON

    Example:
        >>> config = load_config('studio')
        >>> config['period_labels']['month']
        'Este mes'
    """
    config_path = CONFIG_DIR / f"{config_name}.json"

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_studio_config() -> Dict[str, Any]:
    """Get the studio dashboard configuration.

    Returns:
        Configuration dictionary with status/period labels, calendar, booking,
        budget and finance settings
    """
    return load_config('studio')


def get_config_value(config_name: str, *keys: str, default: Any = None) -> Any:
    """Get a nested configuration value by key path.

    Args:
        config_name: Name of the config file
        *keys: Path to the nested value (e.g., 'budget', 'progress_warning')
        default: Default value if key path doesn't exist

    Returns:
        The configuration value at the specified path, or default if not found

    Example:
        >>> get_config_value('studio', 'calendar', 'year_span')
        3
    """
    try:
        config = load_config(config_name)
        value = config
        for key in keys:
            value = value[key]
        return value
    except (KeyError, FileNotFoundError):
        return default
