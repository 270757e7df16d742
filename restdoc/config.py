# Configuration settings should be set in app.config
# get_config falls back to the RESTDOC class variables and the environment
import os
import logging
from flask import current_app
import restdoc
from typing import Any, Optional


def get_config(option: str) -> Optional[Any]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        return current_app.config[option]
    except (KeyError, RuntimeError):
        # KeyError: not set in the app config, RuntimeError: working outside of the app context
        pass

    result = getattr(restdoc.RESTDOC, option, None)
    if result is None:
        result = os.environ.get(option, None)
    return result


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return restdoc.log.getEffectiveLevel() < logging.INFO
