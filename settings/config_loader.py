# settings/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the bootstrapper.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file, and command-line arguments, applying this order
of precedence:
1. Pydantic Model Defaults
2. Environment Variables (WINGET_BOOTSTRAP_*, loaded by BaseSettings)
3. YAML Configuration File
4. Command-Line Arguments
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .config_models import AppSettings

module_logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively merges `overrides` into `source` in place.

    Nested dictionaries are merged key by key; any other value replaces the
    one in `source` unless it is None, so an unset CLI flag never clobbers a
    value that came from the environment or the YAML file.

    Returns:
        The updated `source` dictionary.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
    return source


def _read_yaml_config(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI args."
        )
        return {}
    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data and isinstance(yaml_data, dict):
        logger_to_use.info(f"Loaded configuration from {yaml_config_path}")
        return yaml_data
    if yaml_data is not None:
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
    return {}


def _map_cli_args(cli_args: argparse.Namespace) -> Dict[str, Any]:
    cli_arg_dict = vars(cli_args)
    mapped_cli_values: Dict[str, Any] = {}

    if cli_arg_dict.get("verbose"):
        mapped_cli_values["verbose"] = True
    if cli_arg_dict.get("progress") is not None:
        mapped_cli_values["progress_preference"] = cli_arg_dict["progress"]
    if cli_arg_dict.get("repair_policy") is not None:
        mapped_cli_values["repair_failure_policy"] = cli_arg_dict[
            "repair_policy"
        ]
    if cli_arg_dict.get("module_name") is not None:
        mapped_cli_values["module_name"] = cli_arg_dict["module_name"]
    if cli_arg_dict.get("module_root") is not None:
        mapped_cli_values["module_root"] = str(cli_arg_dict["module_root"])
    if cli_arg_dict.get("powershell") is not None:
        mapped_cli_values["powershell_executable"] = cli_arg_dict[
            "powershell"
        ]
    return mapped_cli_values


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Union[str, Path] = DEFAULT_CONFIG_FILE,
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Loads application settings with the precedence described in the module
    docstring.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Path to the YAML configuration file.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        SystemExit: If the merged configuration fails validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # BaseSettings has already applied defaults < environment here.
    current_values_dict = AppSettings().model_dump(exclude_defaults=False)

    yaml_data = _read_yaml_config(Path(config_file_path), logger_to_use)
    current_values_dict = _deep_update(current_values_dict, yaml_data)

    if cli_args:
        current_values_dict = _deep_update(
            current_values_dict, _map_cli_args(cli_args)
        )

    try:
        final_settings = AppSettings(**current_values_dict)
    except Exception as e:  # Catch Pydantic validation errors etc.
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.info(
        "Successfully loaded and validated application settings"
    )
    return final_settings
