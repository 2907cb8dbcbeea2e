"""
Configuration for netchannel.

Holds the channel defaults and the helpers that read overrides from the
environment. Values are looked up in the order: instance configuration,
``NETCHANNEL_*`` environment variables, built-in default.
"""

import os
from typing import Any, Dict, Optional

ENV_PREFIX = "NETCHANNEL_"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 10000
MAX_BUFFER = 65536
DEFAULT_ATTEMPTS = 10
DEFAULT_DELAY = 1.0
DEFAULT_HISTORY_SIZE = 100

MIN_PORT = 1
MAX_PORT = 65535


def is_valid_port(port: Any) -> bool:
    """Return True if ``port`` is an integer in the range 1-65535."""
    if isinstance(port, bool) or not isinstance(port, int):
        return False
    return MIN_PORT <= port <= MAX_PORT


def get_env_config(key: str) -> Optional[str]:
    """
    Get a configuration value from the environment.

    Args:
        key: The configuration key, e.g. ``max_buffer``

    Returns:
        The raw value of ``NETCHANNEL_<KEY>``, or None if it is not set
    """
    return os.environ.get(f"{ENV_PREFIX}{key.upper()}")


def get_env_bool(name: str, default: bool = False) -> bool:
    """
    Get a boolean value from an environment variable.

    Args:
        name: The name of the environment variable
        default: The default value if the environment variable is not set

    Returns:
        The boolean value
    """
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "y", "t")


def get_env_dict(name: str, default: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Get a dictionary from a comma-separated environment variable.

    Args:
        name: The name of the environment variable
        default: The default value if the environment variable is not set

    Returns:
        The dictionary
    """
    value = os.environ.get(name)
    if not value:
        return default or {}

    result = {}
    for pair in value.split(","):
        if "=" in pair:
            key, val = pair.split("=", 1)
            result[key.strip()] = val.strip()
    return result


def parse_bool(value: Any) -> bool:
    """Interpret a config value that may be a bool or an environment string."""
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "y", "t")
    return bool(value)
