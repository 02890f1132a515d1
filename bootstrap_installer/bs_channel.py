# bootstrap_installer/bs_channel.py
# -*- coding: utf-8 -*-
from typing import Any, Dict

from settings.config_models import AppSettings

from .bs_states import ChannelState
from .bs_utils import BS_SYMBOLS, context_logger


def prepare_repository_channel(
    context: Dict[str, Any], app_settings: AppSettings, **kwargs
) -> bool:
    """
    Registers and trusts the primary repository, best effort.

    Any failure marks the channel unusable for this run instead of raising,
    which later routes module acquisition to the direct archive download.

    Sets 'channel_state' and 'channel_usable' in the context.

    Returns:
        Whether the repository can be used for Install-Module.
    """
    logger = context_logger(context)
    channels = context["services"].channels
    repository = app_settings.gallery.repository_name
    context["channel_state"] = None

    logger.info(
        f"{BS_SYMBOLS['info']} Checking repository '{repository}'..."
    )
    try:
        state = channels.get(repository)
        context["channel_state"] = state
        if state is ChannelState.UNCONFIGURED:
            logger.info(
                f"{BS_SYMBOLS['gear']} Repository '{repository}' is not registered. Registering it as trusted."
            )
            channels.register_default(trusted=True)
        elif state is ChannelState.UNTRUSTED:
            logger.info(
                f"{BS_SYMBOLS['gear']} Repository '{repository}' is untrusted. Setting its policy to trusted."
            )
            channels.set_trust(repository, trusted=True)
        else:
            logger.info(
                f"{BS_SYMBOLS['success']} Repository '{repository}' is already trusted."
            )
    except Exception as e:
        logger.warning(
            f"{BS_SYMBOLS['warning']} Could not configure repository '{repository}' ({e}). The direct download fallback will be used."
        )
        context["channel_usable"] = False
        return False

    context["channel_usable"] = True
    return True
