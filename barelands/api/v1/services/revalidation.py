"""Collaborators notified when rendered pages must be regenerated."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

import httpx

from barelands.api.v1.configs.logging_init import logger


class Revalidator(ABC):
    @abstractmethod
    async def invalidate(self, path: str) -> None:
        """Mark ``path`` stale; raise on failure."""


class StalePathRegistry(Revalidator):
    """
    In-process record of stale paths.

    The rendering layer polls ``is_stale`` before serving a cached page and
    calls ``consume`` once it has regenerated it.
    """

    def __init__(self):
        self._stale: dict[str, datetime] = {}

    async def invalidate(self, path: str) -> None:
        self.mark(path)

    def mark(self, path: str) -> datetime:
        marked_at = datetime.now(timezone.utc)
        self._stale[path] = marked_at
        logger.debug(f"Marked {path} stale at {marked_at.isoformat()}")
        return marked_at

    def is_stale(self, path: str) -> bool:
        return path in self._stale

    def consume(self, path: str) -> bool:
        return self._stale.pop(path, None) is not None

    def stale_paths(self) -> dict[str, str]:
        return {path: marked_at.isoformat() for path, marked_at in self._stale.items()}


class WebhookRevalidator(Revalidator):
    """Calls ``GET <url>?path=<path>&secret=<secret>`` on the frontend."""

    def __init__(self, url: str, secret: str | None = None, timeout: float = 5.0, transport=None):
        self.url = url
        self.secret = secret
        self.timeout = timeout
        self._transport = transport

    async def invalidate(self, path: str) -> None:
        params = {"path": path}
        if self.secret:
            params["secret"] = self.secret

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.url, params=params)
            response.raise_for_status()
        logger.debug(f"Webhook revalidated {path} ({response.status_code})")
