import asyncio
import json
from unittest.mock import patch

import pytest

from barelands.api.v1.services.catalog_store import CatalogStore
from barelands.api.v1.services.image_assets import ImagePayload, LocalImageStore
from barelands.api.v1.services.revalidation import Revalidator, StalePathRegistry
from barelands.api.v1.services.synchronizer import CatalogSynchronizer
from barelands.models.models.photos import PhotoRecord


class FailingRevalidator(Revalidator):
    async def invalidate(self, path: str) -> None:
        raise RuntimeError(f"cannot reach frontend for {path}")


class SlowRevalidator(Revalidator):
    async def invalidate(self, path: str) -> None:
        await asyncio.sleep(1)


def make_record(record_id: str, image: str, date_added: str = "2025-01-01T00:00:00.000Z"):
    return PhotoRecord(
        id=record_id, title=record_id, category="Oceans", image=image, date_added=date_added
    )


@pytest.fixture
def store(tmp_path):
    return CatalogStore(tmp_path / "data" / "photos.json")


@pytest.fixture
def assets(tmp_path):
    return LocalImageStore(tmp_path / "public", "uploads")


@pytest.fixture
def registry():
    return StalePathRegistry()


@pytest.fixture
def synchronizer(store, assets, registry):
    return CatalogSynchronizer(
        store, assets, revalidators=[registry], default_paths=["/", "/admin"]
    )


class TestSync:
    async def test_empty_catalog(self, synchronizer):
        assert await synchronizer.sync() == 0
        assert synchronizer.photos() == []

    async def test_drops_records_with_missing_local_files(self, synchronizer, store, assets, png_bytes):
        present = await assets.store(ImagePayload(png_bytes, "image/png"))
        await store.save(
            [
                make_record("present", present),
                make_record("missing", "/uploads/gone.jpg"),
                make_record("external", "https://images.example.com/a.jpg"),
            ]
        )

        count = await synchronizer.sync()

        assert count == 2
        assert {photo.id for photo in synchronizer.photos()} == {"present", "external"}
        assert synchronizer.last_report.dropped == ["missing"]
        assert synchronizer.last_report.original_count == 3

    async def test_sync_does_not_rewrite_document(self, synchronizer, store):
        await store.save([make_record("missing", "/uploads/gone.jpg")])
        before = store.data_path.read_text()

        await synchronizer.sync()

        assert store.data_path.read_text() == before
        assert [item["id"] for item in json.loads(before)] == ["missing"]

    async def test_served_view_is_newest_first(self, synchronizer, store):
        await store.save(
            [
                make_record("old", "https://x/a.jpg", "2024-01-01T00:00:00.000Z"),
                make_record("new", "https://x/b.jpg", "2025-06-01T00:00:00.000Z"),
            ]
        )

        await synchronizer.sync()

        assert [photo.id for photo in synchronizer.photos()] == ["new", "old"]

    async def test_sync_is_idempotent(self, synchronizer, store):
        await store.save([make_record("a", "https://x/a.jpg")])

        assert await synchronizer.sync() == await synchronizer.sync() == 1

    async def test_picks_up_out_of_process_edits(self, synchronizer, store):
        await store.save([make_record("a", "https://x/a.jpg")])
        await synchronizer.sync()

        document = json.loads(store.data_path.read_text())
        document.append(make_record("b", "https://x/b.jpg").to_json())
        store.data_path.write_text(json.dumps(document))

        assert await synchronizer.sync() == 2

    async def test_photos_returns_copies(self, synchronizer, store):
        await store.save([make_record("a", "https://x/a.jpg")])
        await synchronizer.sync()

        synchronizer.photos()[0].title = "mutated"

        assert synchronizer.photos()[0].title == "a"

    async def test_missing_image_warned_once(self, synchronizer, store):
        await store.save([make_record("missing", "/uploads/gone.jpg")])

        with patch("barelands.api.v1.services.synchronizer.logger") as logger:
            await synchronizer.sync()
            await synchronizer.sync()

        assert logger.warning.call_count == 1
        assert "missing" in logger.warning.call_args.args[0]


class TestInvalidate:
    async def test_default_paths_marked_stale(self, synchronizer, registry):
        result = await synchronizer.invalidate()

        assert result == {"success": ["/", "/admin"], "failed": []}
        assert registry.is_stale("/") and registry.is_stale("/admin")

    async def test_failure_is_reported_not_raised(self, store, assets, registry):
        synchronizer = CatalogSynchronizer(
            store, assets, revalidators=[registry, FailingRevalidator()], default_paths=["/"]
        )

        result = await synchronizer.invalidate(["/", "/prints"])

        assert result == {"success": [], "failed": ["/", "/prints"]}
        # The in-process registry still recorded the paths
        assert registry.is_stale("/prints")

    async def test_timeout_counts_as_failure(self, store, assets):
        synchronizer = CatalogSynchronizer(
            store, assets, revalidators=[SlowRevalidator()], revalidation_timeout=0.01
        )

        result = await synchronizer.invalidate(["/"])

        assert result == {"success": [], "failed": ["/"]}

    async def test_after_mutation_refreshes_and_invalidates(self, synchronizer, store, registry):
        await store.save([make_record("a", "https://x/a.jpg")])

        result = await synchronizer.after_mutation(["/portfolio"])

        assert [photo.id for photo in synchronizer.photos()] == ["a"]
        assert result["success"] == ["/portfolio"]
        assert registry.is_stale("/portfolio")

    async def test_after_mutation_survives_sync_errors(self, synchronizer, monkeypatch):
        async def broken_sync():
            raise OSError("disk vanished")

        monkeypatch.setattr(synchronizer, "sync", broken_sync)

        result = await synchronizer.after_mutation(["/"])

        assert result == {"success": ["/"], "failed": []}
