"""Configuration loading and merging utilities.

This module handles YAML config file loading, environment variable expansion,
and deep merging of per-queue option overrides.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any

import yaml

from opqueue.core.config.models import Config

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(obj: Any) -> Any:
    """Expand ${VAR} patterns in strings, recursing through dicts and lists.

    Unknown variables are left as-is so check_unexpanded_vars() can report them.

    Examples:
        >>> os.environ['QUEUE_NS'] = 'billing'
        >>> expand_env_vars({'namespace': '${QUEUE_NS}'})
        {'namespace': 'billing'}
    """
    if isinstance(obj, dict):
        return {key: expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [expand_env_vars(item) for item in obj]
    if isinstance(obj, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), obj)
    return obj


def check_unexpanded_vars(data: Any, source: str) -> None:
    """Raise if any ${VAR} pattern survived expansion.

    Args:
        data: Expanded configuration data.
        source: Label used in the error message (e.g., file path).

    Raises:
        ValueError: Naming every unresolved variable.
    """
    found: set[str] = set()
    stack = [data]
    while stack:
        item = stack.pop()
        if isinstance(item, dict):
            stack.extend(item.values())
        elif isinstance(item, list):
            stack.extend(item)
        elif isinstance(item, str):
            found.update(f"${{{name}}}" for name in _ENV_PATTERN.findall(item))

    if found:
        raise ValueError(
            f"Unresolved environment variable(s) in {source}: {', '.join(sorted(found))}. "
            f"Set these variables or remove the ${{VAR}} references."
        )


def merge_options(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge ``override`` over ``base`` without mutating either.

    Examples:
        >>> merge_options({'debug': False, 'namespace': 'a'}, {'debug': True})
        {'debug': True, 'namespace': 'a'}
    """
    result = copy.copy(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_options(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Path | str) -> Config:
    """Load configuration from a YAML file with environment variable expansion.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If a ${VAR} reference cannot be resolved.
        yaml.YAMLError: If the YAML is malformed.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    data = expand_env_vars(data)
    check_unexpanded_vars(data, source=str(config_path))

    return Config(**data)
