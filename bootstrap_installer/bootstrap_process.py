# bootstrap_installer/bootstrap_process.py
# -*- coding: utf-8 -*-
"""
This module defines the two bootstrap operations.

`ensure_provider` makes the NuGet package provider available.
`ensure_module_and_repair` runs it first, then, through a centralized
orchestrator, prepares the PSGallery repository, checks for the WinGet
client module, installs it (repository or direct download), imports it and
repairs the WinGet package manager.

Host access goes through a BootstrapServices bundle so each collaborator
can be replaced; `create_default_services` wires the PowerShell and HTTP
implementations.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from common.network_utils import create_http_session
from common.orchestrator import Orchestrator
from common.powershell.ps_manager import PowerShellManager
from settings.config_models import AppSettings

from .bs_channel import prepare_repository_channel
from .bs_gallery import GalleryClient
from .bs_module import acquire_module, check_module_presence, import_client_module
from .bs_provider import ensure_provider_ready
from .bs_registries import (
    ChannelRegistry,
    HostTlsPolicy,
    ModuleRegistry,
    PowerShellChannelRegistry,
    PowerShellModuleRegistry,
    PowerShellProviderRegistry,
    ProviderRegistry,
    RepairEngine,
    TlsPolicy,
    WinGetRepairEngine,
)
from .bs_repair import repair_package_manager
from .bs_utils import BS_SYMBOLS, get_bs_logger


@dataclass
class BootstrapServices:
    providers: ProviderRegistry
    modules: ModuleRegistry
    channels: ChannelRegistry
    repair: RepairEngine
    gallery: GalleryClient
    tls: TlsPolicy


def create_default_services(
    app_settings: AppSettings, logger: Optional[logging.Logger] = None
) -> BootstrapServices:
    """PowerShell-backed registries and an HTTP gallery client."""
    ps_manager = PowerShellManager(app_settings, logger)
    session = create_http_session()
    return BootstrapServices(
        providers=PowerShellProviderRegistry(ps_manager),
        modules=PowerShellModuleRegistry(ps_manager),
        channels=PowerShellChannelRegistry(ps_manager),
        repair=WinGetRepairEngine(ps_manager, app_settings.module_name),
        gallery=GalleryClient(app_settings, session, logger),
        tls=HostTlsPolicy(ps_manager, session, app_settings, logger),
    )


def ensure_provider(
    app_settings: AppSettings,
    services: Optional[BootstrapServices] = None,
    logger: Optional[logging.Logger] = None,
) -> Optional[str]:
    """
    Ensures the package provider is present, installing and remediating as
    needed.

    Args:
        app_settings: The application settings.
        services: Host collaborators; the PowerShell-backed defaults when None.
        logger: An optional logger instance.

    Returns:
        The provider version when known.

    Raises:
        ProviderError: The provider could not be installed or imported.
    """
    effective_logger = logger or get_bs_logger("Provider")
    context: Dict[str, Any] = {
        "services": services or create_default_services(app_settings, logger),
        "logger": effective_logger,
    }
    return ensure_provider_ready(context, app_settings)


def ensure_module_and_repair(
    app_settings: AppSettings,
    services: Optional[BootstrapServices] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Brings the WinGet client module to a ready state and repairs the
    package manager.

    The provider step's errors propagate unchanged. Repository preparation
    never fails the run; it only decides between the repository install and
    the direct archive download.

    Args:
        app_settings: The application settings.
        services: Host collaborators; the PowerShell-backed defaults when None.
        logger: An optional logger instance.

    Returns:
        The orchestration context, holding the provider version, channel
        state, module state, acquisition path and repair outcome.

    Raises:
        ProviderError: From the provider step.
        FallbackInstallError: The direct download path failed.
        ModuleImportError: The module could not be imported.
        RepairError: The repair failed under the 'fatal' policy.
    """
    effective_logger = logger or get_bs_logger("Orchestrator")
    effective_logger.info(
        f"{BS_SYMBOLS['info']} Starting WinGet bootstrap for module '{app_settings.module_name}'..."
    )

    orchestrator = Orchestrator(app_settings, effective_logger)
    orchestrator.context["services"] = services or create_default_services(
        app_settings, logger
    )
    orchestrator.context["logger"] = effective_logger
    orchestrator.context["channel_usable"] = False

    orchestrator.add_task("Package Provider", ensure_provider_ready)
    orchestrator.add_task("Repository Channel", prepare_repository_channel)
    orchestrator.add_task("Module Presence", check_module_presence)
    orchestrator.add_task("Module Acquisition", acquire_module)
    orchestrator.add_task("Module Import", import_client_module)
    orchestrator.add_task("Package Manager Repair", repair_package_manager)

    orchestrator.run()

    via = orchestrator.context.get("module_acquired_via")
    if via:
        effective_logger.info(
            f"{BS_SYMBOLS['success']} WinGet bootstrap finished. Module installed via {via}."
        )
    else:
        effective_logger.info(
            f"{BS_SYMBOLS['success']} WinGet bootstrap finished. Module was already installed."
        )
    return orchestrator.context
