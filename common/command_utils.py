# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Host command execution and the shared bootstrap log helper.
"""

import logging
import shutil
import subprocess
from typing import Dict, List, Optional

from settings.config_models import SYMBOLS_DEFAULT, AppSettings

module_logger = logging.getLogger(__name__)

# "success" has no logging level of its own.
_LOG_METHODS = {
    "debug": "debug",
    "info": "info",
    "success": "info",
    "warning": "warning",
    "error": "error",
    "critical": "critical",
}


def get_symbols(app_settings: Optional[AppSettings]) -> Dict[str, str]:
    """Symbols from the settings, or the defaults when settings are absent."""
    if app_settings and app_settings.symbols:
        return app_settings.symbols
    return SYMBOLS_DEFAULT


def log_bootstrap(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    app_settings: Optional[AppSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a bootstrapper message.

    Args:
        message: Text to log, usually prefixed with a symbol.
        level: "debug", "info", "success", "warning", "error" or "critical";
            unknown names log at INFO.
        current_logger: Logger to use; defaults to the module logger.
        app_settings: Accepted so every helper can forward the same
            arguments.
        exc_info: Attach the active exception to the record.
    """
    logger_to_use = current_logger if current_logger else module_logger
    log_method = getattr(logger_to_use, _LOG_METHODS.get(level, "info"))
    log_method(message, exc_info=exc_info)


def run_command(
    command: List[str],
    app_settings: Optional[AppSettings],
    check: bool = True,
    capture_output: bool = False,
    current_logger: Optional[logging.Logger] = None,
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    log_command: Optional[str] = None,
) -> subprocess.CompletedProcess:
    """
    Runs `command` and returns the completed process (text mode).

    The command line, or `log_command` in its place for commands that
    embed long scripts, is logged at debug level. A failing command's
    stderr is logged at error level before the exception propagates.

    Raises:
        subprocess.CalledProcessError: Non-zero exit code with check=True.
        FileNotFoundError: The executable is not on PATH.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    shown = log_command or subprocess.list2cmdline(command)
    location = f" (in {cwd})" if cwd else ""

    log_bootstrap(
        f"{symbols.get('gear', '⚙️')} Executing: {shown}{location}",
        "debug",
        logger_to_use,
        app_settings,
    )
    try:
        result = subprocess.run(
            list(command),
            check=check,
            capture_output=capture_output,
            text=True,
            cwd=cwd,
            env=env,
        )
    except subprocess.CalledProcessError as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} `{shown}` exited with code {e.returncode}.",
            "error",
            logger_to_use,
            app_settings,
        )
        stderr = (e.stderr or "").strip()
        if stderr:
            log_bootstrap(
                f"   stderr: {stderr}", "error", logger_to_use, app_settings
            )
        raise
    except FileNotFoundError as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Executable not found: {e.filename or command[0]}.",
            "error",
            logger_to_use,
            app_settings,
        )
        raise

    if capture_output and result.stderr and result.stderr.strip():
        log_bootstrap(
            f"   stderr: {result.stderr.strip()}",
            "debug",
            logger_to_use,
            app_settings,
        )
    return result


def command_exists(command_name: str) -> bool:
    """True if `command_name` resolves on PATH."""
    return shutil.which(command_name) is not None
