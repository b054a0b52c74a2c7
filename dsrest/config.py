# Configuration settings should be set in app.config
# The DSREST class attributes hold the defaults, they can be overridden with
# keyword arguments to DSREST.init_app or with environment variables
import os
import logging
from flask import current_app
import dsrest
from typing import Any


def get_config(option: str) -> Any:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # no app context or the option isn't set in the app config
        result = getattr(dsrest.DSREST, option, None)

    if result is None:
        result = os.environ.get(option, None)

    return result


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return dsrest.log.getEffectiveLevel() < logging.INFO
