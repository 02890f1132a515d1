# bootstrap_installer/bs_module.py
# -*- coding: utf-8 -*-
from typing import Any, Dict, Optional

from settings.config_models import AppSettings

from .bs_errors import ModuleImportError
from .bs_fallback import install_module_from_gallery
from .bs_states import InstallOutcome, QueryResult, QueryStatus
from .bs_utils import BS_SYMBOLS, SCOPE_ALL_USERS, context_logger


def check_module_presence(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> QueryResult:
    """
    Queries whether the client module is installed.

    A failed query is logged and then handled exactly like an absent module.
    Sets 'module_state' in the context.
    """
    logger = context_logger(context)
    name = app_settings.module_name
    logger.info(f"{BS_SYMBOLS['info']} Checking for module '{name}'...")
    try:
        result = context["services"].modules.list_installed(name)
    except Exception as e:
        result = QueryResult.failed(e)

    if result.status is QueryStatus.QUERY_FAILED:
        logger.warning(
            f"{BS_SYMBOLS['warning']} Could not query module '{name}' ({result.error}). Treating it as absent."
        )
    elif result.is_present:
        logger.info(
            f"{BS_SYMBOLS['success']} Module '{name}' {result.version} is already installed."
        )
    else:
        logger.info(f"Module '{name}' is not installed.")
    context["module_state"] = result
    return result


def _install_from_repository(
    context: Dict[str, Any], app_settings: AppSettings
) -> InstallOutcome:
    name = app_settings.module_name
    repository = app_settings.gallery.repository_name
    logger = context_logger(context)
    logger.info(
        f"{BS_SYMBOLS['package']} Installing module '{name}' from '{repository}'..."
    )
    try:
        version = context["services"].modules.install(
            name,
            scope=SCOPE_ALL_USERS,
            force=True,
            allow_clobber=True,
            repository=repository,
        )
    except Exception as e:
        return InstallOutcome.failure(e)
    return InstallOutcome.success(version)


def acquire_module(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> Optional[str]:
    """
    Installs the client module when the presence check found it missing.

    The repository is tried first if the channel is usable; a failure there
    marks the channel unusable and falls through to the direct archive
    download, whose errors are fatal.

    Sets 'module_acquired_via' ("repository", "archive" or None) and
    'module_install_completed' in the context.

    Returns:
        The installed (or already present) version when known.

    Raises:
        FallbackInstallError: The direct archive download failed.
    """
    logger = context_logger(context)
    name = app_settings.module_name
    state: QueryResult = context["module_state"]
    context["module_acquired_via"] = None
    context["module_install_completed"] = False

    if state.is_present:
        logger.info(f"Module '{name}' present; skipping installation.")
        return state.version

    if context.get("channel_usable"):
        outcome = _install_from_repository(context, app_settings)
        if outcome.succeeded:
            logger.info(
                f"{BS_SYMBOLS['success']} Module '{name}' installed from the repository."
            )
            context["module_acquired_via"] = "repository"
            context["module_install_completed"] = True
            return outcome.version
        logger.warning(
            f"{BS_SYMBOLS['warning']} Install-Module for '{name}' failed ({outcome.cause}). Falling back to direct download."
        )
        context["channel_usable"] = False
    else:
        logger.info(
            f"Repository unusable this run; installing '{name}' by direct download."
        )

    version = install_module_from_gallery(
        name, context["services"].gallery, app_settings, logger
    )
    context["module_acquired_via"] = "archive"
    context["module_install_completed"] = True
    return version


def import_client_module(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> None:
    """
    Force-imports the client module.

    Raises:
        ModuleImportError: The module could not be imported, or neither a
            presence check nor an install has established it.
    """
    logger = context_logger(context)
    name = app_settings.module_name
    state: Optional[QueryResult] = context.get("module_state")
    established = (state is not None and state.is_present) or context.get(
        "module_install_completed", False
    )
    if not established:
        raise ModuleImportError(
            f"module '{name}' was neither found nor installed"
        )

    logger.info(f"{BS_SYMBOLS['gear']} Importing module '{name}'...")
    try:
        context["services"].modules.import_module(name, force=True)
    except Exception as e:
        logger.error(
            f"{BS_SYMBOLS['error']} Importing module '{name}' failed: {e}"
        )
        raise ModuleImportError(
            f"importing module '{name}' failed", cause=e
        ) from e
    logger.info(f"{BS_SYMBOLS['success']} Module '{name}' imported.")
