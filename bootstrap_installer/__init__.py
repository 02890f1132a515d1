# bootstrap_installer/__init__.py
# -*- coding: utf-8 -*-
"""
WinGet bootstrap package.

Ensures the NuGet package provider and the Microsoft.WinGet.Client module
are present and importable, falling back to a direct gallery download when
the PSGallery repository cannot be used, then repairs the WinGet package
manager. `bootstrap_process` is the entry point for both operations.

Once the module is ready, `install_winget_package` installs individual
packages through it for callers that embed the bootstrapper.
"""

from .bootstrap_process import (
    BootstrapServices,
    create_default_services,
    ensure_module_and_repair,
    ensure_provider,
)
from .bs_package import PackageInstallOptions, install_winget_package

__all__ = [
    "BootstrapServices",
    "PackageInstallOptions",
    "create_default_services",
    "ensure_module_and_repair",
    "ensure_provider",
    "install_winget_package",
]
