#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for the WinGet bootstrapper.

Loads the bootstrap workflow module (the packaged one unless --module-path
overrides it), resolves settings and runs `ensure_module_and_repair`.
"""

import argparse
import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import List, Optional

from bootstrap_installer import bootstrap_process
from bootstrap_installer.bs_errors import BootstrapError
from common.logging_config import setup_logging
from settings.config import PROGRESS_PREFERENCES, SCRIPT_VERSION
from settings.config_loader import DEFAULT_CONFIG_FILE, load_app_settings
from settings.config_models import RepairFailurePolicy

DEFAULT_WORKFLOW_PATH = Path(bootstrap_process.__file__).resolve()
WORKFLOW_ENTRY = "ensure_module_and_repair"


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Bootstrap the NuGet provider and the WinGet client module, then repair WinGet."
    )
    parser.add_argument(
        "--module-path",
        default=None,
        help=f"Bootstrap workflow module to load (default: {DEFAULT_WORKFLOW_PATH}).",
    )
    parser.add_argument(
        "--progress",
        choices=list(PROGRESS_PREFERENCES),
        default=None,
        help="Progress display level for PowerShell operations.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--config-file",
        default=DEFAULT_CONFIG_FILE,
        help="YAML configuration file (default: %(default)s).",
    )
    parser.add_argument(
        "--repair-policy",
        choices=[p.value for p in RepairFailurePolicy],
        default=None,
        help="Whether a failed package manager repair fails the run.",
    )
    parser.add_argument(
        "--module-name",
        default=None,
        help="Gallery id of the client module (default: Microsoft.WinGet.Client).",
    )
    parser.add_argument(
        "--module-root",
        default=None,
        help="Machine-wide module directory used by the direct download install.",
    )
    parser.add_argument(
        "--powershell",
        default=None,
        help="PowerShell executable to run (default: pwsh, or powershell on Windows).",
    )
    parser.add_argument(
        "--log-file", default=None, help="Also write JSON logs to this file."
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {SCRIPT_VERSION}"
    )
    return parser.parse_args(args)


def load_workflow_module(module_path: Path) -> ModuleType:
    """
    Imports the workflow module at `module_path`.

    Raises:
        ImportError: The file cannot be loaded or lacks the entry function.
    """
    if module_path.resolve() == DEFAULT_WORKFLOW_PATH:
        module = importlib.import_module(bootstrap_process.__name__)
    else:
        spec = importlib.util.spec_from_file_location(
            f"winget_bootstrap_workflow_{module_path.stem}", module_path
        )
        if not spec or not spec.loader:
            raise ImportError(f"Cannot load workflow module from {module_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        spec.loader.exec_module(module)

    if not callable(getattr(module, WORKFLOW_ENTRY, None)):
        raise ImportError(
            f"Workflow module {module_path} does not define {WORKFLOW_ENTRY}()"
        )
    return module


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the bootstrapper.

    Args:
        args: Command-line arguments. If None, sys.argv[1:] is used.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parsed_args = parse_args(args)
    logger = setup_logging(parsed_args.verbose, parsed_args.log_file)

    module_path = (
        Path(parsed_args.module_path)
        if parsed_args.module_path
        else DEFAULT_WORKFLOW_PATH
    )
    if not module_path.is_file():
        logger.error(f"Bootstrap module not found: {module_path}")
        return 1

    try:
        workflow = load_workflow_module(module_path)
        app_settings = load_app_settings(
            parsed_args, parsed_args.config_file, logger
        )
        getattr(workflow, WORKFLOW_ENTRY)(app_settings, logger=logger)
    except BootstrapError as e:
        logger.error(f"Bootstrap failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Error: {str(e)}")
        return 1

    logger.info("WinGet client module is ready.")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
