import logging

from barelands.models.logging import configure_colored_logger

CLI_FORMAT = "%(log_color)s%(levelname)-8s%(reset)s %(name)s: %(message)s"

logger = logging.getLogger("barelands-cli")
logger.propagate = True


def setup_logging(verbose: bool = False, verbose_level: str = "INFO") -> logging.Logger:
    """Errors only unless ``--verbose`` is passed; command output goes through rich."""
    return configure_colored_logger(logger, CLI_FORMAT, verbose, verbose_level, logging.ERROR)
