"""
Centralized logging initialization to avoid circular imports.
This module initializes the api, models and cli loggers with the same
verbosity settings from the global configuration.
"""

import logging
from typing import Optional

from barelands.api.v1.configs.custom_logging import format_pydantic, setup_logging
from barelands.api.v1.configs.settings_models import Settings
from barelands.cli.cli_logging import setup_logging as setup_cli_logging
from barelands.models.logging import setup_logging as setup_models_logging

# Re-export format_pydantic for use by other modules
__all__ = ["logger", "initialize_loggers", "format_pydantic"]

settings = Settings()

logger = setup_logging(__name__, level=settings.logging.verbosity_level)


def initialize_loggers(
    verbose: Optional[bool] = True,
    verbose_level: Optional[str] = None,
) -> logging.Logger:
    """
    Initialize all loggers with consistent settings.

    Args:
        verbose: Whether verbose logging is enabled for the cli and models loggers
        verbose_level: Verbosity level (DEBUG, INFO, ...). Defaults to the configured level.

    Returns:
        The configured api logger
    """
    if verbose_level is None:
        verbose_level = settings.logging.verbosity_level

    if verbose is None:
        verbose = True

    setup_cli_logging(verbose=verbose, verbose_level=verbose_level)
    setup_models_logging(verbose=verbose, verbose_level=verbose_level)

    global logger
    logger = setup_logging(__name__, level=verbose_level)

    return logger
