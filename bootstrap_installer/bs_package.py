# bootstrap_installer/bs_package.py
# -*- coding: utf-8 -*-
"""
Single package installs through the WinGet client module.

Library entry point, exported from the `bootstrap_installer` package. The
CLI only bootstraps; callers that embed the bootstrapper install packages
with `install_winget_package` once the module is ready.

PackageInstallOptions enumerates every optional Install-WinGetPackage
parameter the bootstrapper forwards; unset options are simply left off the
command line.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from common.powershell.ps_manager import PowerShellManager, quote

module_logger = logging.getLogger(__name__)


class InstallScope(str, Enum):
    ANY = "Any"
    USER = "User"
    SYSTEM = "System"
    USER_OR_UNKNOWN = "UserOrUnknown"
    SYSTEM_OR_UNKNOWN = "SystemOrUnknown"


class InstallMode(str, Enum):
    DEFAULT = "Default"
    SILENT = "Silent"
    INTERACTIVE = "Interactive"


class PackageInstallOptions(BaseModel):
    """Validated arguments for one Install-WinGetPackage call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Optional[str] = Field(default=None, description="Package name to match.")
    package_id: Optional[str] = Field(default=None, description="Exact package identifier.")
    override: Optional[str] = Field(default=None, description="Replaces the installer's own arguments.")
    scope: Optional[InstallScope] = None
    mode: Optional[InstallMode] = None
    force: bool = False
    allow_hash_mismatch: bool = False
    source: Optional[str] = Field(default=None, description="WinGet source to install from.")

    @model_validator(mode="after")
    def _name_xor_id(self) -> "PackageInstallOptions":
        if bool(self.name) == bool(self.package_id):
            raise ValueError("exactly one of 'name' or 'package_id' is required")
        return self

    def to_command(self) -> str:
        """The Install-WinGetPackage invocation for these options."""
        parts = ["Install-WinGetPackage"]
        if self.package_id:
            parts.append(f"-Id {quote(self.package_id)}")
        else:
            parts.append(f"-Name {quote(self.name)}")
        if self.override is not None:
            parts.append(f"-Override {quote(self.override)}")
        if self.scope is not None:
            parts.append(f"-Scope {self.scope.value}")
        if self.mode is not None:
            parts.append(f"-Mode {self.mode.value}")
        if self.force:
            parts.append("-Force")
        if self.allow_hash_mismatch:
            parts.append("-AllowHashMismatch")
        if self.source is not None:
            parts.append(f"-Source {quote(self.source)}")
        return " ".join(parts)


def install_winget_package(
    options: PackageInstallOptions,
    ps_manager: PowerShellManager,
    module_name: str,
    current_logger: Optional[logging.Logger] = None,
) -> Any:
    """
    Installs one package with the WinGet client module.

    Returns:
        The decoded install result reported by Install-WinGetPackage.
    """
    logger_to_use = current_logger if current_logger else module_logger
    target = options.package_id or options.name
    logger_to_use.info(f"Installing WinGet package '{target}'...")
    result = ps_manager.run_json(
        f"Import-Module -Name {quote(module_name)}; {options.to_command()}"
    )
    logger_to_use.info(f"Install-WinGetPackage finished for '{target}'.")
    return result
