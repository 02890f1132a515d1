# settings/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the bootstrapper,
including defaults, type annotations, and descriptions.
It utilizes Pydantic for data validation and settings management.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Dict, List, Union

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from settings.config import SYMBOLS

# --- Default Static Values (can be overridden by config file/env/cli) ---
PROVIDER_NAME_DEFAULT: str = "NuGet"
PROVIDER_MIN_VERSION_DEFAULT: str = "2.8.5.201"
REMEDIATION_MODULES_DEFAULT: List[str] = ["PackageManagement", "PowerShellGet"]

REPOSITORY_NAME_DEFAULT: str = "PSGallery"
MODULE_NAME_DEFAULT: str = "Microsoft.WinGet.Client"
GALLERY_API_URL_DEFAULT: str = "https://www.powershellgallery.com/api/v2"
HTTP_TIMEOUT_DEFAULT: float = 120.0

POWERSHELL_EXECUTABLE_DEFAULT: str = "powershell" if os.name == "nt" else "pwsh"

SYMBOLS_DEFAULT: Dict[str, str] = dict(SYMBOLS)


def default_module_root() -> Path:
    """
    Machine-wide module directory used by the fallback installer.

    Windows PowerShell reads AllUsers modules from
    '%ProgramFiles%\\WindowsPowerShell\\Modules'; PowerShell 7 on other
    platforms uses '/usr/local/share/powershell/Modules'.
    """
    program_files = os.environ.get("ProgramFiles")
    if program_files:
        return Path(program_files) / "WindowsPowerShell" / "Modules"
    return Path("/usr/local/share/powershell/Modules")


class RepairFailurePolicy(str, Enum):
    """What to do when the package-manager repair operation fails."""

    FATAL = "fatal"
    WARN = "warn"


class ProgressPreference(str, Enum):
    """PowerShell $ProgressPreference values accepted by the CLI."""

    SILENT = "silent"
    CONTINUE = "continue"
    INQUIRE = "inquire"
    BREAK = "break"
    STOP = "stop"


class ProviderSettings(BaseSettings):
    """Package provider settings."""
    model_config = SettingsConfigDict(
        env_prefix='WINGET_BOOTSTRAP_PROVIDER_',
        extra='ignore'
    )

    name: str = Field(default=PROVIDER_NAME_DEFAULT, description="Package provider to bootstrap.")
    min_version: str = Field(default=PROVIDER_MIN_VERSION_DEFAULT,
                             description="Minimum provider version requested on install.")
    remediation_modules: List[str] = Field(
        default_factory=lambda: list(REMEDIATION_MODULES_DEFAULT),
        description="Packaging modules refreshed before retrying a failed provider install."
    )


class GallerySettings(BaseSettings):
    """Distribution channel and metadata service settings."""
    model_config = SettingsConfigDict(
        env_prefix='WINGET_BOOTSTRAP_GALLERY_',
        extra='ignore'
    )

    repository_name: str = Field(default=REPOSITORY_NAME_DEFAULT,
                                 description="Repository registered as the primary install channel.")
    api_url: Union[HttpUrl, str] = Field(default=GALLERY_API_URL_DEFAULT,
                                         description="Base URL of the OData v2 gallery feed.")
    http_timeout: float = Field(default=HTTP_TIMEOUT_DEFAULT, gt=0,
                                description="Timeout in seconds for metadata and archive requests.")


class AppSettings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_prefix='WINGET_BOOTSTRAP_',
        extra='ignore'
    )

    module_name: str = Field(default=MODULE_NAME_DEFAULT, description="Client module to install and import.")
    module_root: Path = Field(default_factory=default_module_root,
                              description="Machine-wide module root used by the fallback installer.")
    repair_failure_policy: RepairFailurePolicy = Field(
        default=RepairFailurePolicy.FATAL,
        description="'fatal' propagates a failed repair; 'warn' logs it and succeeds."
    )
    progress_preference: ProgressPreference = Field(
        default=ProgressPreference.SILENT,
        description="Progress display level forwarded to every PowerShell call."
    )
    verbose: bool = Field(default=False, description="Enable debug logging and -Verbose on cmdlets.")
    powershell_executable: str = Field(default=POWERSHELL_EXECUTABLE_DEFAULT,
                                       description="PowerShell host used for provider/module operations.")

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    gallery: GallerySettings = Field(default_factory=GallerySettings)

    # Static symbols, could also be loaded from a separate static config if preferred
    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))
