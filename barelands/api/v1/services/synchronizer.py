"""
Catalog Synchronizer: keeps the served photo list consistent with the
persisted document and tells the rendering layer which pages went stale.
"""

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.services.catalog_store import CatalogStore, sort_newest_first
from barelands.api.v1.services.image_assets import ImageStore
from barelands.api.v1.services.revalidation import Revalidator
from barelands.models.models.photos import PhotoRecord


@dataclass
class SyncReport:
    original_count: int = 0
    photo_count: int = 0
    dropped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "photoCount": self.photo_count,
            "originalCount": self.original_count,
            "dropped": list(self.dropped),
        }


class CatalogSynchronizer:
    def __init__(
        self,
        store: CatalogStore,
        assets: ImageStore,
        revalidators: Sequence[Revalidator] = (),
        default_paths: Iterable[str] = ("/",),
        revalidation_timeout: float = 5.0,
        asset_timeout: float = 30.0,
    ):
        self.store = store
        self.assets = assets
        self.revalidators = list(revalidators)
        self.default_paths = list(default_paths)
        self.revalidation_timeout = revalidation_timeout
        self.asset_timeout = asset_timeout
        self._cache: list[PhotoRecord] = []
        self.last_report = SyncReport()

    async def _asset_present(self, record: PhotoRecord) -> bool:
        try:
            return await asyncio.wait_for(
                self.assets.exists(record.image), timeout=self.asset_timeout
            )
        except Exception as e:
            # Could not confirm either way: keep serving the record
            logger.warning(f"Could not check asset {record.image} of photo {record.id}: {e}")
            return True

    async def sync(self) -> int:
        """
        Reload the document, drop records whose managed asset is missing and
        replace the served view with the rest.

        The document itself is left untouched: dropped records stay persisted
        until they are explicitly removed.

        Returns:
            Number of records in the served view.
        """
        records = await self.store.load()
        present = await asyncio.gather(*(self._asset_present(record) for record in records))

        already_dropped = set(self.last_report.dropped)
        kept: list[PhotoRecord] = []
        dropped: list[str] = []
        for record, ok in zip(records, present):
            if ok:
                kept.append(record)
                continue
            # Warn once per record until its image comes back
            log = logger.debug if record.id in already_dropped else logger.warning
            log(f"Image file not found for photo {record.id} ({record.title}): {record.image}")
            dropped.append(record.id)

        self._cache = sort_newest_first(kept)
        self.last_report = SyncReport(
            original_count=len(records), photo_count=len(kept), dropped=dropped
        )
        logger.debug(f"Synchronized catalog: {len(kept)}/{len(records)} photos served")
        return len(kept)

    def photos(self) -> list[PhotoRecord]:
        """Copy of the served view, newest first."""
        return [record.model_copy(deep=True) for record in self._cache]

    async def _invalidate_one(self, path: str) -> bool:
        ok = True
        for revalidator in self.revalidators:
            try:
                await asyncio.wait_for(
                    revalidator.invalidate(path), timeout=self.revalidation_timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Revalidation of {path} via {type(revalidator).__name__} timed out "
                    f"after {self.revalidation_timeout}s"
                )
                ok = False
            except Exception as e:
                logger.warning(
                    f"Revalidation of {path} via {type(revalidator).__name__} failed: {e}"
                )
                ok = False
        return ok

    async def invalidate(self, paths: Iterable[str] | None = None) -> dict[str, list[str]]:
        """Best-effort notification; a path is reported failed when any revalidator failed for it."""
        targets = list(self.default_paths if paths is None else paths)
        results = await asyncio.gather(*(self._invalidate_one(path) for path in targets))

        outcome: dict[str, list[str]] = {"success": [], "failed": []}
        for path, ok in zip(targets, results):
            outcome["success" if ok else "failed"].append(path)

        if outcome["failed"]:
            logger.warning(f"Revalidation failed for paths: {outcome['failed']}")
        else:
            logger.info(f"Revalidated paths: {outcome['success']}")
        return outcome

    async def after_mutation(self, paths: Iterable[str] | None = None) -> dict[str, list[str]]:
        """
        Refresh the served view and invalidate pages once a mutation is persisted.

        Never raises: the mutation already stands, so a failure here only
        leaves cached pages briefly stale.
        """
        try:
            await self.sync()
        except Exception as e:
            logger.error(f"Cache refresh after mutation failed: {e}")
        return await self.invalidate(paths)
