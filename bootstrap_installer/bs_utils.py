# bootstrap_installer/bs_utils.py
# -*- coding: utf-8 -*-
import logging
import sys
from typing import Any, Dict, Optional

from settings.config import SYMBOLS

BS_SYMBOLS: Dict[str, str] = dict(SYMBOLS)

SCOPE_ALL_USERS = "AllUsers"
BS_LOGGER_NAMESPACE = "winget_bootstrap"


def get_bs_logger(stage: str) -> logging.Logger:
    """
    Logger for a bootstrap stage when the caller supplies none.

    Adds its own stderr handler only while logging is unconfigured.
    """
    logger = logging.getLogger(f"{BS_LOGGER_NAMESPACE}.{stage.lower()}")
    if logger.handlers or logging.getLogger().handlers:
        return logger
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(f"[{stage.upper()}] %(levelname)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def context_logger(
    context: Dict[str, Any], default: Optional[logging.Logger] = None
) -> logging.Logger:
    """The run's logger from the shared context, else `default`."""
    return context.get("logger") or default or get_bs_logger("Bootstrap")
