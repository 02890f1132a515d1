# bootstrap_installer/bs_repair.py
# -*- coding: utf-8 -*-
from typing import Any, Dict

from settings.config_models import AppSettings, RepairFailurePolicy

from .bs_errors import RepairError
from .bs_utils import BS_SYMBOLS, context_logger


def repair_package_manager(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> bool:
    """
    Repairs the WinGet package manager for all users, forcing the latest
    version.

    With RepairFailurePolicy.WARN a failure is logged and False returned;
    with RepairFailurePolicy.FATAL it raises RepairError.
    """
    logger = context_logger(context)
    policy = app_settings.repair_failure_policy
    logger.info(
        f"{BS_SYMBOLS['step']} Repairing the WinGet package manager (all users, latest)..."
    )
    try:
        context["services"].repair.repair(
            all_users=True, force=True, latest=True
        )
    except Exception as e:
        if policy is RepairFailurePolicy.WARN:
            logger.warning(
                f"{BS_SYMBOLS['warning']} Repairing the WinGet package manager failed: {e}"
            )
            context["repair_succeeded"] = False
            return False
        logger.error(
            f"{BS_SYMBOLS['error']} Repairing the WinGet package manager failed: {e}"
        )
        raise RepairError(
            "Repair-WinGetPackageManager failed", cause=e
        ) from e

    logger.info(
        f"{BS_SYMBOLS['success']} WinGet package manager repaired."
    )
    context["repair_succeeded"] = True
    return True
