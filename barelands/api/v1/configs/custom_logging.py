import logging
import re
import sys
from io import StringIO
from typing import Any

import pydantic
from colorlog import ColoredFormatter
from rich.console import Console
from rich.pretty import Pretty

from barelands.models.logging import LEVEL_COLORS


def format_pydantic(model: pydantic.BaseModel, max_line_length: int = 80) -> str:
    """
    Format a Pydantic model compactly for use in f-strings.

    Args:
        model: A Pydantic model instance
        max_line_length: Maximum length for the single-line representation

    Returns:
        ``Name(key=value, ...)`` on one line when short enough, one field per line otherwise
    """
    if not isinstance(model, pydantic.BaseModel):
        return str(model)

    model_name = model.__class__.__name__
    items = [f"{key}={_plain_format_value(value)}" for key, value in model.model_dump().items()]

    single_line = f"{model_name}({', '.join(items)})"
    if len(single_line) <= max_line_length:
        return single_line

    lines = [f"{model_name}("]
    lines.extend(f"    {item}," for item in items)
    lines.append(")")
    return "\n".join(lines)


def _plain_format_value(value: Any) -> str:
    """Format a value without ANSI colors"""
    if value is None or isinstance(value, bool | int | float):
        return str(value)
    elif isinstance(value, str):
        if len(value) > 40:
            return f"'{value[:37]}...'"
        return f"'{value}'"
    elif isinstance(value, list | tuple):
        if len(value) <= 3:
            return f"[{', '.join(_plain_format_value(item) for item in value)}]"
        return f"[{len(value)} items]"
    elif isinstance(value, dict):
        if len(value) <= 2:
            items = [f"{k}: {_plain_format_value(v)}" for k, v in value.items()]
            return f"{{{', '.join(items)}}}"
        return f"{{{len(value)} items}}"
    repr_val = repr(value)
    if len(repr_val) > 40:
        return repr_val[:37] + "..."
    return repr_val


class RichReprFormatter(ColoredFormatter):
    """
    Colored formatter that renders Pydantic models and containers passed
    directly as the log message.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.string_console = Console(highlight=False, width=120, file=StringIO())

    def format(self, record):
        if isinstance(record.msg, pydantic.BaseModel):
            record.msg = format_pydantic(record.msg)
        elif not isinstance(record.msg, str | int | float | bool | type(None)):
            try:
                self.string_console.file = StringIO()
                self.string_console.print(Pretty(record.msg))
                record.msg = self.string_console.file.getvalue().strip()
            except Exception:
                pass

        # Shorten pathname to start from 'barelands/'
        match = re.search(r"(barelands/.*?)$", record.pathname)
        if match:
            record.pathname = match.group(1)

        return super().format(record)


def setup_logging(name=None, level="INFO"):
    """
    Set up the ``barelands`` logger with colored level names, the path from the
    package folder, and compact rendering of Pydantic models.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("barelands")
    logger.setLevel(numeric_level)
    logger.propagate = True

    if logger.handlers:
        logger.handlers = []

    formatter = RichReprFormatter(
        "%(asctime)s - %(log_color)s%(levelname)s%(reset)s - %(pathname)s:%(bold)s%(lineno)d%(reset)s - %(bold)s%(funcName)s%(reset)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        reset=True,
        log_colors=LEVEL_COLORS,
        secondary_log_colors={"bold": {level_name: "bold" for level_name in LEVEL_COLORS}},
        style="%",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


# The logger will be initialized by logging_init.py
