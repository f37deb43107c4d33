"""Project version, read from the source tree or from the installed distribution."""

from functools import lru_cache
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version
from pathlib import Path

import tomli

from barelands.api.v1.configs.logging_init import logger

PYPROJECT_PATH = Path(__file__).parent.parent / "pyproject.toml"
UNKNOWN_VERSION = "0.0.0"


def _source_tree_version(pyproject_path: Path) -> str | None:
    if not pyproject_path.is_file():
        return None
    with open(pyproject_path, "rb") as f:
        return tomli.load(f).get("project", {}).get("version")


def _installed_version() -> str | None:
    try:
        return distribution_version("barelands")
    except PackageNotFoundError:
        return None


@lru_cache(maxsize=1)
def get_version() -> str:
    """pyproject.toml of a checkout first, then the installed metadata."""
    version = _source_tree_version(PYPROJECT_PATH) or _installed_version() or UNKNOWN_VERSION
    logger.debug(f"Project version: {version}")
    return version


def api_version_for(version: str) -> str:
    """``v<major>``; pre-1.0 releases serve the ``v1`` API."""
    major = int(version.split(".", 1)[0] or 0)
    return f"v{max(major, 1)}"


def get_api_version() -> str:
    return api_version_for(get_version())
