"""Main configuration loading functions.

This module provides the entry points to load a configuration:
- load_config(): Load from a YAML string
- load_config_file(): Load from a file path
- resolve_config_path(): Find a configuration file on disk
"""

import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import ConfigCycleError, ConfigIncludeError, ConfigPathError
from .operations import deep_merge, extract_directives, parse_value, set_nested_value

__all__ = ["load_config", "load_config_file", "resolve_config_path"]

# Environment variable listing additional configuration directories
CONFIG_PATH_ENV = "RECOFLOW_CONFIG_PATH"


def resolve_config_path(cfg_path: str, current_dir: Optional[str] = None) -> str:
    """Find a configuration file.

    The path is tried as is, then relative to `current_dir`, then relative to
    each of the directories listed in the `RECOFLOW_CONFIG_PATH` environment
    variable (colon-separated).

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file (absolute or relative)
    current_dir : str, optional
        Directory relative to which the path is first resolved

    Returns
    -------
    str
        Absolute path to the configuration file

    Raises
    ------
    ConfigPathError
        If the file cannot be found anywhere
    """
    candidates = []
    if os.path.isabs(cfg_path):
        candidates.append(cfg_path)
    else:
        if current_dir is not None:
            candidates.append(os.path.join(current_dir, cfg_path))
        candidates.append(os.path.abspath(cfg_path))
        for search_dir in os.environ.get(CONFIG_PATH_ENV, "").split(":"):
            if search_dir:
                candidates.append(os.path.join(search_dir, cfg_path))

    for candidate in candidates:
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)

    raise ConfigPathError(
        f"Configuration file not found: {cfg_path}. Searched: {candidates}"
    )


def _load_recursive(
    cfg_path: Optional[str] = None,
    config_string: Optional[str] = None,
    root_dir: Optional[str] = None,
    include_stack: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], Dict[str, Any], List[str]]:
    """Recursively load a configuration with cycle detection.

    Parameters
    ----------
    cfg_path : str, optional
        Path to configuration file (mutually exclusive with config_string)
    config_string : str, optional
        YAML configuration string (mutually exclusive with cfg_path)
    root_dir : str, optional
        Root directory used to resolve relative include paths
    include_stack : List[str], optional
        Stack of currently-loading files

    Returns
    -------
    Tuple[Dict[str, Any], Dict[str, Any], List[str]]
        (config content, override directives, removal directives)
    """
    if (cfg_path is None) == (config_string is None):
        raise ValueError("Must provide exactly one of cfg_path or config_string")

    # Determine the identifier for cycle detection and the root directory
    if cfg_path is not None:
        identifier = os.path.abspath(cfg_path)
        root_dir = root_dir or os.path.dirname(identifier)
    else:
        identifier = "<string>"
        root_dir = root_dir or os.getcwd()

    include_stack = include_stack or []
    if identifier in include_stack:
        raise ConfigCycleError(include_stack + [identifier])
    include_stack = include_stack + [identifier]

    # Load YAML
    try:
        if cfg_path is not None:
            with open(identifier, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f)
        else:
            main_config = yaml.safe_load(config_string)
    except FileNotFoundError as exc:
        raise ConfigIncludeError(f"Configuration file not found: {cfg_path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigIncludeError(f"Error loading {identifier}: {exc}") from exc

    if main_config is None:
        return {}, {}, []

    includes, overrides, removals, cleaned = extract_directives(main_config)

    # Merge the included files first, the current file takes precedence
    config = {}
    for include_file in includes:
        try:
            include_path = resolve_config_path(include_file, root_dir)
        except ConfigPathError as exc:
            raise ConfigIncludeError(
                f"Included file '{include_file}' not found from {identifier}"
            ) from exc

        inc_config, inc_overrides, inc_removals = _load_recursive(
            cfg_path=include_path, include_stack=include_stack
        )
        config = deep_merge(config, inc_config)
        config = _apply_directives(config, inc_overrides, inc_removals)

    config = deep_merge(config, cleaned)

    return config, overrides, removals


def _apply_directives(
    config: Dict[str, Any], overrides: Dict[str, Any], removals: List[str]
) -> Dict[str, Any]:
    """Apply removals, then overrides, to a configuration dictionary."""
    for key_path in removals:
        config, _ = set_nested_value(config, key_path, None, delete=True)
    for key_path, value in overrides.items():
        config, _ = set_nested_value(config, key_path, parse_value(value))

    return config


def load_config(config_str: str, root_dir: Optional[str] = None) -> Dict[str, Any]:
    """Load a configuration from a YAML string.

    Parameters
    ----------
    config_str : str
        YAML configuration string
    root_dir : str, optional
        Root directory used to resolve relative include paths. Defaults to the
        current working directory.

    Returns
    -------
    Dict[str, Any]
        Loaded and merged configuration

    Raises
    ------
    ConfigCycleError
        If a circular include is detected
    ConfigIncludeError
        If an included file is not found or cannot be parsed
    ConfigPathError
        If a removal targets a non-existent path
    """
    config, overrides, removals = _load_recursive(
        config_string=config_str, root_dir=root_dir
    )

    return _apply_directives(config, overrides, removals)


def load_config_file(cfg_path: str) -> Dict[str, Any]:
    """Load a configuration from a file.

    The file's directory is used as root directory to resolve includes.

    Parameters
    ----------
    cfg_path : str
        Path to configuration file

    Returns
    -------
    Dict[str, Any]
        Loaded and merged configuration
    """
    config, overrides, removals = _load_recursive(cfg_path=cfg_path)

    return _apply_directives(config, overrides, removals)
