# common/powershell/ps_manager.py
# -*- coding: utf-8 -*-
import json
import logging
import subprocess
from typing import Any, Optional

from common.command_utils import command_exists, run_command
from settings.config import PROGRESS_PREFERENCES
from settings.config_models import AppSettings

TLS12_STATEMENT = (
    "[Net.ServicePointManager]::SecurityProtocol = "
    "[Net.ServicePointManager]::SecurityProtocol -bor "
    "[Net.SecurityProtocolType]::Tls12"
)


class PowerShellError(RuntimeError):
    """A PowerShell script exited non-zero or produced unreadable output."""

    def __init__(self, message: str, returncode: Optional[int] = None,
                 stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def quote(value: str) -> str:
    """Quote a value as a single-quoted PowerShell string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class PowerShellManager:
    """
    A centralized runner for PowerShell scripts.

    Every call starts a fresh non-interactive PowerShell process, so session
    state that must hold for the whole run (progress and verbose preferences,
    the TLS 1.2 protocol flag) is re-applied through a preamble on each call.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the PowerShellManager.
        Args:
            app_settings: The application settings.
            logger: An optional logging object.
        """
        self.app_settings = app_settings
        self.logger = logger or logging.getLogger(__name__)
        self.executable = app_settings.powershell_executable
        self.tls12_enforced = False
        if not command_exists(self.executable):
            self.logger.critical(
                f"'{self.executable}' command not found. This manager cannot function."
            )
            raise FileNotFoundError(
                f"'{self.executable}' not found. Is PowerShell installed?"
            )

    def build_preamble(self) -> str:
        progress = PROGRESS_PREFERENCES[
            self.app_settings.progress_preference.value
        ]
        statements = [
            "$ErrorActionPreference = 'Stop'",
            f"$ProgressPreference = '{progress}'",
        ]
        if self.app_settings.verbose:
            statements.append("$VerbosePreference = 'Continue'")
        if self.tls12_enforced:
            statements.append(TLS12_STATEMENT)
        return "; ".join(statements)

    def run_script(
        self, script: str, check: bool = True
    ) -> subprocess.CompletedProcess:
        """
        Runs a script in a fresh PowerShell process.

        Args:
            script: PowerShell statements to run after the preamble.
            check: Raise PowerShellError on a non-zero exit code.

        Returns:
            The completed process with captured text output.
        """
        full_script = f"{self.build_preamble()}; {script}"
        command = [
            self.executable,
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            full_script,
        ]
        try:
            return run_command(
                command,
                self.app_settings,
                check=check,
                capture_output=True,
                current_logger=self.logger,
                log_command=f"{self.executable} -Command {script}",
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise PowerShellError(
                f"PowerShell script failed (rc {e.returncode}): {stderr or script}",
                returncode=e.returncode,
                stderr=stderr,
            ) from e

    def run_json(self, script: str) -> Any:
        """
        Runs a script whose pipeline output is serialized with ConvertTo-Json.

        Returns:
            The decoded JSON value, or None when the script produced no output.
        """
        result = self.run_script(
            f"{script} | ConvertTo-Json -Depth 4 -Compress"
        )
        output = (result.stdout or "").strip()
        if not output:
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise PowerShellError(
                f"Could not parse PowerShell JSON output: {output[:200]}"
            ) from e

    def enable_tls12(self) -> None:
        """
        Verifies that the host accepts the TLS 1.2 protocol flag and applies
        it to every subsequent call.
        """
        self.run_script(TLS12_STATEMENT)
        self.tls12_enforced = True
        self.logger.debug("TLS 1.2 enabled for PowerShell sessions.")
