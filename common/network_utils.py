# common/network_utils.py
# -*- coding: utf-8 -*-
"""
Network-related utility functions.
"""
import logging
import ssl
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from settings.config_models import AppSettings
from .command_utils import get_symbols, log_bootstrap

module_logger = logging.getLogger(__name__)

USER_AGENT = "winget-bootstrap"


class TLSAdapter(HTTPAdapter):
    """HTTPAdapter whose SSL context refuses anything older than TLS 1.2."""

    def __init__(
        self,
        minimum_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2,
        **kwargs,
    ):
        self.minimum_version = minimum_version
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        context = ssl.create_default_context()
        context.minimum_version = self.minimum_version
        kwargs["ssl_context"] = context
        return super().init_poolmanager(*args, **kwargs)


def create_http_session() -> requests.Session:
    """Session used for gallery metadata and archive downloads."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def enforce_minimum_tls(
    session: requests.Session,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Mounts a TLS 1.2+ adapter for every https:// request made by `session`.

    Raises:
        ssl.SSLError, ValueError: If the local OpenSSL build cannot pin the
            minimum protocol version.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    adapter = TLSAdapter()
    session.mount("https://", adapter)
    log_bootstrap(
        f"{symbols.get('info', 'ℹ️')} Outbound HTTPS pinned to TLS 1.2 or newer.",
        "debug",
        logger_to_use,
        app_settings,
    )
