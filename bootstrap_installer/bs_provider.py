# bootstrap_installer/bs_provider.py
# -*- coding: utf-8 -*-
from typing import Any, Dict, Optional

from settings.config_models import AppSettings

from .bs_errors import ProviderImportError, ProviderInstallError
from .bs_states import InstallOutcome, QueryResult, QueryStatus
from .bs_utils import BS_SYMBOLS, SCOPE_ALL_USERS, context_logger


def _enforce_tls(context: Dict[str, Any]) -> None:
    logger = context_logger(context)
    try:
        context["services"].tls.enforce()
        logger.info(f"{BS_SYMBOLS['info']} Outbound TLS 1.2 enforced.")
    except Exception as e:
        logger.warning(
            f"{BS_SYMBOLS['warning']} Could not enforce TLS 1.2 ({e}). Continuing with the host default."
        )


def _query_provider(context: Dict[str, Any], name: str) -> QueryResult:
    logger = context_logger(context)
    try:
        result = context["services"].providers.list_installed(name)
    except Exception as e:
        result = QueryResult.failed(e)
    if result.status is QueryStatus.QUERY_FAILED:
        logger.warning(
            f"{BS_SYMBOLS['warning']} Could not query package provider '{name}' ({result.error}). Treating it as absent."
        )
    return result


def _install_provider(
    context: Dict[str, Any], app_settings: AppSettings
) -> InstallOutcome:
    provider = app_settings.provider
    logger = context_logger(context)
    logger.info(
        f"{BS_SYMBOLS['package']} Installing package provider '{provider.name}' (scope {SCOPE_ALL_USERS})..."
    )
    try:
        version = context["services"].providers.install(
            provider.name,
            scope=SCOPE_ALL_USERS,
            force=True,
            minimum_version=provider.min_version,
        )
    except Exception as e:
        return InstallOutcome.failure(e)
    return InstallOutcome.success(version)


def _remediate(context: Dict[str, Any], app_settings: AppSettings) -> None:
    """Refresh the packaging modules the provider install depends on."""
    logger = context_logger(context)
    modules = context["services"].modules
    for module_name in app_settings.provider.remediation_modules:
        logger.info(
            f"{BS_SYMBOLS['gear']} Updating packaging module '{module_name}'..."
        )
        try:
            modules.install(
                module_name,
                scope=SCOPE_ALL_USERS,
                force=True,
                allow_clobber=True,
            )
        except Exception as e:
            logger.warning(
                f"{BS_SYMBOLS['warning']} Updating '{module_name}' failed: {e}"
            )


def ensure_provider_ready(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> Optional[str]:
    """
    Makes sure the package provider is installed and usable.

    An installed provider is left alone. A missing one is installed; if that
    fails, the packaging modules are refreshed and the install is retried
    once, after which the provider is force-imported so the refreshed
    PackageManagement is the one in use.

    Reads 'services' and 'logger' from the context and records
    'provider_version' and 'provider_remediated'.

    Returns:
        The provider version when known (for logging only).

    Raises:
        ProviderInstallError: The install failed again after remediation.
        ProviderImportError: The provider could not be imported.
    """
    logger = context_logger(context)
    provider = app_settings.provider
    context["provider_remediated"] = False

    _enforce_tls(context)

    logger.info(
        f"{BS_SYMBOLS['info']} Checking for package provider '{provider.name}'..."
    )
    state = _query_provider(context, provider.name)
    if state.is_present:
        logger.info(
            f"{BS_SYMBOLS['success']} Package provider '{provider.name}' already installed (version {state.version or 'unknown'})."
        )
        context["provider_version"] = state.version
        return state.version

    outcome = _install_provider(context, app_settings)
    if outcome.succeeded:
        logger.info(
            f"{BS_SYMBOLS['success']} Package provider '{provider.name}' installed."
        )
        context["provider_version"] = outcome.version
        return outcome.version

    logger.warning(
        f"{BS_SYMBOLS['warning']} Installing '{provider.name}' failed ({outcome.cause}). Updating packaging modules and retrying once."
    )
    context["provider_remediated"] = True
    _remediate(context, app_settings)

    retry = _install_provider(context, app_settings)
    if not retry.succeeded:
        logger.error(
            f"{BS_SYMBOLS['error']} Package provider '{provider.name}' could not be installed after remediation."
        )
        raise ProviderInstallError(
            f"installing package provider '{provider.name}' failed after remediation",
            cause=retry.cause,
        ) from retry.cause

    try:
        context["services"].providers.import_provider(provider.name, force=True)
    except Exception as e:
        logger.error(
            f"{BS_SYMBOLS['error']} Importing package provider '{provider.name}' failed: {e}"
        )
        raise ProviderImportError(
            f"importing package provider '{provider.name}' failed", cause=e
        ) from e

    logger.info(
        f"{BS_SYMBOLS['success']} Package provider '{provider.name}' installed after remediation and imported."
    )
    context["provider_version"] = retry.version
    return retry.version
