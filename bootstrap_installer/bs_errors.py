# bootstrap_installer/bs_errors.py
# -*- coding: utf-8 -*-
"""
Exception hierarchy for the bootstrap workflow.

Every fatal error names the phase that failed and keeps the underlying
exception both as `cause` and as `__cause__` (raised with `from`).
"""

from typing import Optional


class BootstrapError(Exception):
    """Base class for fatal bootstrap failures."""

    phase = "bootstrap"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        text = f"{self.phase} failed: {self.message}"
        if self.cause is not None:
            text += f" (cause: {self.cause})"
        return text


class ProviderError(BootstrapError):
    phase = "provider bootstrap"


class ProviderInstallError(ProviderError):
    """The provider install failed again after remediation."""

    phase = "provider install"


class ProviderImportError(ProviderError):
    phase = "provider import"


class ModuleError(BootstrapError):
    phase = "module install"


class FallbackInstallError(ModuleError):
    """Direct archive acquisition failed; there is no further fallback."""

    phase = "fallback install"


class FallbackTimeoutError(FallbackInstallError):
    """A gallery request of the fallback path timed out."""

    phase = "fallback download"


class ModuleImportError(ModuleError):
    phase = "module import"


class RepairError(ModuleError):
    phase = "package manager repair"
