# bootstrap_installer/bs_registries.py
# -*- coding: utf-8 -*-
"""
Host collaborators used by the bootstrap workflow.

The abstract classes describe what the workflow needs from the host: the
package provider registry, the module registry, the repository (channel)
registry, the package manager repair operation and the TLS policy. The
PowerShell-backed classes implement them on top of PowerShellManager.

Each PowerShellManager call runs in a fresh PowerShell process, so the
"import into the active session" operations verify that the provider or
module loads cleanly; scripts that need the module later import it again.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from common.network_utils import enforce_minimum_tls
from common.powershell.ps_manager import PowerShellManager, quote
from settings.config_models import AppSettings

from .bs_states import ChannelState, QueryResult

VERSION_PROJECTION = "@{Name='Version';Expression={$_.Version.ToString()}}"


def _version_from(payload: Any) -> Optional[str]:
    """Version from a ConvertTo-Json payload (object or one-element list)."""
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if isinstance(payload, dict):
        version = payload.get("Version")
        return str(version) if version is not None else None
    return None


class ProviderRegistry(ABC):
    """Package provider capability of the host."""

    @abstractmethod
    def list_installed(self, name: str) -> QueryResult:
        pass

    @abstractmethod
    def install(
        self,
        name: str,
        scope: str,
        force: bool,
        minimum_version: Optional[str] = None,
    ) -> Optional[str]:
        """Install the provider; returns the installed version if known."""
        pass

    @abstractmethod
    def import_provider(self, name: str, force: bool) -> None:
        pass


class ModuleRegistry(ABC):
    """Module registry of the host."""

    @abstractmethod
    def list_installed(self, name: str) -> QueryResult:
        pass

    @abstractmethod
    def install(
        self,
        name: str,
        scope: str,
        force: bool,
        allow_clobber: bool,
        repository: Optional[str] = None,
    ) -> Optional[str]:
        """Install the module; returns the installed version if known."""
        pass

    @abstractmethod
    def import_module(self, name: str, force: bool) -> None:
        pass


class ChannelRegistry(ABC):
    """Registration and trust of the primary distribution repository."""

    @abstractmethod
    def get(self, name: str) -> ChannelState:
        pass

    @abstractmethod
    def register_default(self, trusted: bool) -> None:
        pass

    @abstractmethod
    def set_trust(self, name: str, trusted: bool) -> None:
        pass


class RepairEngine(ABC):
    """The package manager's own repair operation."""

    @abstractmethod
    def repair(self, all_users: bool, force: bool, latest: bool) -> None:
        pass


class TlsPolicy(ABC):
    """Process-wide outbound TLS policy."""

    @abstractmethod
    def enforce(self) -> None:
        pass


class PowerShellProviderRegistry(ProviderRegistry):
    def __init__(self, ps_manager: PowerShellManager):
        self.ps = ps_manager

    def list_installed(self, name: str) -> QueryResult:
        script = (
            f"Get-PackageProvider -ListAvailable -Name {quote(name)} "
            "-ErrorAction SilentlyContinue | Sort-Object Version -Descending "
            f"| Select-Object -First 1 {VERSION_PROJECTION}"
        )
        try:
            payload = self.ps.run_json(script)
        except Exception as e:
            return QueryResult.failed(e)
        if payload is None:
            return QueryResult.absent()
        return QueryResult.present(_version_from(payload))

    def install(
        self,
        name: str,
        scope: str,
        force: bool,
        minimum_version: Optional[str] = None,
    ) -> Optional[str]:
        script = f"Install-PackageProvider -Name {quote(name)} -Scope {scope}"
        if minimum_version:
            script += f" -MinimumVersion {quote(minimum_version)}"
        if force:
            script += " -Force"
        payload = self.ps.run_json(
            f"{script} | Select-Object {VERSION_PROJECTION}"
        )
        return _version_from(payload)

    def import_provider(self, name: str, force: bool) -> None:
        script = f"Import-PackageProvider -Name {quote(name)}"
        if force:
            script += " -Force"
        self.ps.run_script(f"{script} | Out-Null")


class PowerShellModuleRegistry(ModuleRegistry):
    def __init__(self, ps_manager: PowerShellManager):
        self.ps = ps_manager

    def list_installed(self, name: str) -> QueryResult:
        script = (
            f"Get-Module -ListAvailable -Name {quote(name)} "
            "| Sort-Object Version -Descending "
            f"| Select-Object -First 1 {VERSION_PROJECTION}"
        )
        try:
            payload = self.ps.run_json(script)
        except Exception as e:
            return QueryResult.failed(e)
        if payload is None:
            return QueryResult.absent()
        return QueryResult.present(_version_from(payload))

    def install(
        self,
        name: str,
        scope: str,
        force: bool,
        allow_clobber: bool,
        repository: Optional[str] = None,
    ) -> Optional[str]:
        script = f"Install-Module -Name {quote(name)} -Scope {scope}"
        if repository:
            script += f" -Repository {quote(repository)}"
        if force:
            script += " -Force"
        if allow_clobber:
            script += " -AllowClobber"
        payload = self.ps.run_json(
            f"{script} -PassThru | Select-Object {VERSION_PROJECTION}"
        )
        return _version_from(payload)

    def import_module(self, name: str, force: bool) -> None:
        script = f"Import-Module -Name {quote(name)}"
        if force:
            script += " -Force"
        self.ps.run_script(script)


class PowerShellChannelRegistry(ChannelRegistry):
    def __init__(self, ps_manager: PowerShellManager):
        self.ps = ps_manager

    def get(self, name: str) -> ChannelState:
        payload = self.ps.run_json(
            f"Get-PSRepository -Name {quote(name)} -ErrorAction SilentlyContinue "
            "| Select-Object Name, InstallationPolicy"
        )
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not payload:
            return ChannelState.UNCONFIGURED
        if str(payload.get("InstallationPolicy", "")).lower() == "trusted":
            return ChannelState.TRUSTED
        return ChannelState.UNTRUSTED

    def register_default(self, trusted: bool) -> None:
        policy = "Trusted" if trusted else "Untrusted"
        self.ps.run_script(
            f"Register-PSRepository -Default -InstallationPolicy {policy}"
        )

    def set_trust(self, name: str, trusted: bool) -> None:
        policy = "Trusted" if trusted else "Untrusted"
        self.ps.run_script(
            f"Set-PSRepository -Name {quote(name)} -InstallationPolicy {policy}"
        )


class WinGetRepairEngine(RepairEngine):
    """Runs Repair-WinGetPackageManager from the client module."""

    def __init__(self, ps_manager: PowerShellManager, module_name: str):
        self.ps = ps_manager
        self.module_name = module_name

    def repair(self, all_users: bool, force: bool, latest: bool) -> None:
        script = "Repair-WinGetPackageManager"
        if all_users:
            script += " -AllUsers"
        if force:
            script += " -Force"
        if latest:
            script += " -Latest"
        self.ps.run_script(
            f"Import-Module -Name {quote(self.module_name)} -Force; {script}"
        )


class HostTlsPolicy(TlsPolicy):
    """Pins TLS 1.2+ for both the HTTP session and PowerShell sessions."""

    def __init__(
        self,
        ps_manager: PowerShellManager,
        session: requests.Session,
        app_settings: Optional[AppSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.ps = ps_manager
        self.session = session
        self.app_settings = app_settings
        self.logger = logger

    def enforce(self) -> None:
        enforce_minimum_tls(self.session, self.app_settings, self.logger)
        self.ps.enable_tls12()
