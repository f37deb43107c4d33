import logging

from colorlog import ColoredFormatter

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

MODELS_FORMAT = (
    "%(log_color)s%(asctime)s%(reset)s - %(name)s - %(log_color)s%(levelname)s%(reset)s"
    " - %(filename)s:%(lineno)d - %(message)s"
)

# Handlers are attached by the API or the CLI through setup_logging
logger = logging.getLogger("barelands-models")
logger.propagate = True


def configure_colored_logger(
    target: logging.Logger,
    fmt: str,
    verbose: bool,
    verbose_level: str,
    quiet_level: int,
) -> logging.Logger:
    """
    Give ``target`` a single colored stream handler.

    ``verbose_level`` applies when ``verbose`` is set, ``quiet_level`` otherwise.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(ColoredFormatter(fmt, reset=True, log_colors=LEVEL_COLORS))

    target.handlers.clear()
    target.addHandler(handler)
    if verbose:
        target.setLevel(logging.getLevelNamesMapping().get(verbose_level.upper(), logging.INFO))
    else:
        target.setLevel(quiet_level)
    return target


def setup_logging(verbose: bool = False, verbose_level: str = "INFO") -> logging.Logger:
    return configure_colored_logger(logger, MODELS_FORMAT, verbose, verbose_level, logging.CRITICAL)
