"""
Access log configuration for the Barelands API.

The revalidation secret and bearer tokens can travel in query strings, so
access log lines are masked before they are written.
"""

import copy
import re

from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter


class MaskedAccessFormatter(AccessFormatter):
    """Access log formatter that masks sensitive query parameters."""

    SECRET_PATTERN = re.compile(r"(\?|&)(secret|token|access_token)=([^&\s\"]+)")

    def formatMessage(self, record):
        message = super().formatMessage(record)
        return self.SECRET_PATTERN.sub(r"\1\2=***MASKED***", message)


def uvicorn_log_config() -> dict:
    """Uvicorn's default logging config with the access formatter swapped for the masking one."""
    config = copy.deepcopy(LOGGING_CONFIG)
    config["formatters"]["access"]["()"] = "barelands.api.logging_config.MaskedAccessFormatter"
    return config
