"""
Catalog Store: the single owner of the persisted photo document.

The document is one JSON array of photo records. Every mutation runs a
load -> mutate -> save cycle under a per-store ``asyncio.Lock`` so that
concurrent admin requests served by this process never lose updates, and
every save goes through a temp file + ``os.replace`` so that readers never
observe a partially written document.
"""

import asyncio
import json
import os
import tempfile
from collections.abc import Callable, Iterable
from contextlib import suppress
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.errors import InvalidRequestError, StorageFailureError
from barelands.models.models.photos import MUTABLE_FIELDS, PhotoRecord

T = TypeVar("T")


def merge_defaults(
    defaults: Iterable[PhotoRecord], stored: Iterable[PhotoRecord]
) -> list[PhotoRecord]:
    """
    Merge a built-in record set with persisted records, keyed by id.

    Defaults are inserted first and stored records overlay them, so a stored
    record sharing an id with a default wins. The result keeps the mapping's
    insertion order and never contains two records with the same id.
    """
    merged: dict[str, PhotoRecord] = {}
    for record in defaults:
        merged[record.id] = record
    for record in stored:
        merged[record.id] = record
    return [record.model_copy(deep=True) for record in merged.values()]


def sort_newest_first(records: Iterable[PhotoRecord]) -> list[PhotoRecord]:
    return sorted(records, key=lambda record: record.added_at, reverse=True)


def _atomic_write_json(path: Path, data: Any) -> None:
    """Write JSON through a unique temp file in the target directory, then rename it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(data, indent=2, ensure_ascii=False)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=path.name + ".", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            with suppress(OSError):
                os.remove(tmp_name)


class CatalogStore:
    """Read-modify-write access to the photo document at ``data_path``."""

    def __init__(self, data_path: Path):
        self.data_path = Path(data_path)
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Raw document access
    # ------------------------------------------------------------------

    def _read_document(self) -> list[PhotoRecord]:
        records, _ = self._read_items()
        return records

    def _read_items(self) -> tuple[list[PhotoRecord], list[Any]]:
        """Parsed records plus the raw items that failed validation, in document order."""
        if not self.data_path.exists():
            return [], []

        try:
            with self.data_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read catalog document {self.data_path}: {e}")
            return [], []

        if not isinstance(data, list):
            logger.error(
                f"Catalog document {self.data_path} is not a JSON array "
                f"({type(data).__name__}), treating it as empty"
            )
            return [], []

        records: list[PhotoRecord] = []
        invalid: list[Any] = []
        for index, item in enumerate(data):
            try:
                records.append(PhotoRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid record #{index} in {self.data_path}: {e}")
                invalid.append(item)
        return records, invalid

    def _write_document(self, records: list[PhotoRecord], invalid: list[Any] = ()) -> bool:
        """
        Write ``records`` followed by the ``invalid`` raw items, unchanged.

        A raw item whose id now belongs to a valid record is superseded by it.
        """
        ids = {record.id for record in records}
        kept = [item for item in invalid if not (isinstance(item, dict) and item.get("id") in ids)]
        try:
            _atomic_write_json(self.data_path, [record.to_json() for record in records] + kept)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not save catalog document {self.data_path}: {e}")
            return False
        return True

    async def load(self) -> list[PhotoRecord]:
        """
        Read every record of the document.

        A missing document is an empty catalog. An unreadable or malformed
        document is logged and also treated as empty; it is replaced by the
        next successful save.
        """
        return await asyncio.to_thread(self._read_document)

    async def save(self, records: list[PhotoRecord]) -> bool:
        """
        Overwrite the document with ``records``; returns False when the write failed.

        Stored items that do not validate as records are carried over, so a
        save never erases data this process could not read.
        """
        async with self._lock:
            _, invalid = await asyncio.to_thread(self._read_items)
            return await asyncio.to_thread(self._write_document, list(records), invalid)

    # ------------------------------------------------------------------
    # Serialized mutations
    # ------------------------------------------------------------------

    async def mutate(self, operation: Callable[[list[PhotoRecord]], T]) -> T:
        """
        Run ``operation`` on the current record list and persist the list afterwards.

        ``operation`` edits the list in place and returns the value handed back
        to the caller. Mutations of this store are serialized, and the document
        is only rewritten when the operation actually changed the list. Stored
        items that fail validation are never handed to ``operation`` and are
        written back as they were.

        Raises:
            StorageFailureError: if the document could not be written
        """
        async with self._lock:
            records, invalid = await asyncio.to_thread(self._read_items)
            before = [record.to_json() for record in records]
            result = operation(records)
            if [record.to_json() for record in records] == before:
                return result
            saved = await asyncio.to_thread(self._write_document, records, invalid)
        if not saved:
            raise StorageFailureError(
                "Failed to save photo data", details={"path": str(self.data_path)}
            )
        return result

    async def get(self, photo_id: str) -> PhotoRecord | None:
        for record in await self.load():
            if record.id == photo_id:
                return record
        return None

    async def upsert(self, record: PhotoRecord) -> PhotoRecord:
        """Insert ``record`` or, when its id exists, replace every field but id and dateAdded."""

        def _upsert(records: list[PhotoRecord]) -> PhotoRecord:
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    updated = existing.model_copy(
                        update={field: getattr(record, field) for field in MUTABLE_FIELDS}
                    )
                    records[index] = updated
                    return updated
            records.append(record)
            return record

        result = await self.mutate(_upsert)
        logger.info(f"Upserted photo {result.id} ({result.title})")
        return result.model_copy(deep=True)

    async def update(self, photo_id: str, changes: dict[str, Any]) -> PhotoRecord | None:
        """Apply ``changes`` to the record with ``photo_id``; None when absent."""
        changes = {key: value for key, value in changes.items() if key in MUTABLE_FIELDS}

        def _update(records: list[PhotoRecord]) -> PhotoRecord | None:
            for index, existing in enumerate(records):
                if existing.id == photo_id:
                    try:
                        updated = PhotoRecord.model_validate({**existing.model_dump(), **changes})
                    except ValidationError as e:
                        raise InvalidRequestError.from_errors(
                            e.errors(), message="Invalid photo fields"
                        )
                    records[index] = updated
                    return updated
            return None

        result = await self.mutate(_update)
        if result is not None:
            logger.info(f"Updated photo {photo_id}: {sorted(changes)}")
        return result

    async def remove(self, photo_id: str) -> PhotoRecord | None:
        """Delete the record with ``photo_id``; returns it, or None when it was already absent."""

        def _remove(records: list[PhotoRecord]) -> PhotoRecord | None:
            for index, existing in enumerate(records):
                if existing.id == photo_id:
                    return records.pop(index)
            return None

        removed = await self.mutate(_remove)
        if removed is None:
            logger.debug(f"Photo {photo_id} not in catalog, nothing to remove")
        else:
            logger.info(f"Removed photo {photo_id} ({removed.title})")
        return removed

    async def set_featured(self, photo_id: str, value: bool | None = None) -> PhotoRecord | None:
        """
        Set the featured flag of ``photo_id`` to ``value``, or toggle it when ``value`` is None.

        Returns the updated record, or None when the id is absent (nothing is changed).
        """

        def _set_featured(records: list[PhotoRecord]) -> PhotoRecord | None:
            for index, existing in enumerate(records):
                if existing.id == photo_id:
                    featured = (not existing.featured) if value is None else value
                    records[index] = existing.model_copy(update={"featured": featured})
                    return records[index]
            return None

        result = await self.mutate(_set_featured)
        if result is not None:
            logger.info(f"Photo {photo_id} featured={result.featured}")
        return result
