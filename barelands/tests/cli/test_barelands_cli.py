import json
from unittest.mock import AsyncMock, patch

import bcrypt
import pytest
from typer.testing import CliRunner

from barelands.api.v1.errors import StorageFailureError
from barelands.api.v1.services.catalog_store import CatalogStore
from barelands.cli.barelands_cli import app
from barelands.cli.commands.catalog import find_image_files, title_from_filename

runner = CliRunner()


@pytest.fixture
def storage_dir(tmp_path, monkeypatch):
    """Point the CLI's storage settings at a temporary directory."""
    base_dir = tmp_path / "site"
    monkeypatch.setenv("BARELANDS_STORAGE_BASE_DIR", str(base_dir))
    monkeypatch.setenv("BARELANDS_STORAGE_BACKEND", "local")
    monkeypatch.delenv("BARELANDS_REVALIDATION_WEBHOOK_URL", raising=False)
    return base_dir


def _stored(storage_dir):
    return json.loads((storage_dir / "data" / "photos.json").read_text())


class TestPasswordCommands:
    def test_hash_password(self):
        result = runner.invoke(app, ["hash-password", "s3cret-pass"])

        assert result.exit_code == 0
        line = next(
            line for line in result.output.splitlines() if "BARELANDS_AUTH_ADMIN_PASSWORD_HASH" in line
        )
        hashed = line.split('"')[1]
        assert bcrypt.checkpw(b"s3cret-pass", hashed.encode("utf-8"))

    def test_verify_password(self):
        hashed = bcrypt.hashpw(b"s3cret-pass", bcrypt.gensalt(rounds=4)).decode("utf-8")

        assert runner.invoke(app, ["verify-password", "s3cret-pass", hashed]).exit_code == 0
        assert runner.invoke(app, ["verify-password", "wrong", hashed]).exit_code == 1


class TestImportPhotos:
    def test_imports_images_only(self, storage_dir, tmp_path, png_bytes, jpeg_bytes):
        source = tmp_path / "incoming"
        source.mkdir()
        (source / "passo-giau_vertical.png").write_bytes(png_bytes)
        (source / "iguazu.JPG").write_bytes(jpeg_bytes)
        (source / "notes.txt").write_text("not a photo")

        result = runner.invoke(
            app, ["import-photos", str(source), "--category", "Oceans", "--location", "Italy"]
        )

        assert result.exit_code == 0, result.output
        stored = _stored(storage_dir)
        assert sorted(photo["title"] for photo in stored) == ["Iguazu", "Passo Giau Vertical"]
        assert {photo["category"] for photo in stored} == {"Oceans"}
        assert {photo["location"] for photo in stored} == {"Italy"}
        assert len(list((storage_dir / "public" / "uploads").iterdir())) == 2

    def test_categories_rotate_without_option(self, storage_dir, tmp_path, png_bytes):
        source = tmp_path / "incoming"
        source.mkdir()
        for name in ("a.png", "b.png"):
            (source / name).write_bytes(png_bytes)

        assert runner.invoke(app, ["import-photos", str(source)]).exit_code == 0

        categories = [photo["category"] for photo in _stored(storage_dir)]
        assert len(set(categories)) == 2

    def test_unreadable_image_fails_the_run(self, storage_dir, tmp_path, png_bytes):
        source = tmp_path / "incoming"
        source.mkdir()
        (source / "good.png").write_bytes(png_bytes)
        (source / "broken.jpg").write_bytes(b"definitely not a jpeg")

        result = runner.invoke(app, ["import-photos", str(source)])

        assert result.exit_code == 1
        assert [photo["title"] for photo in _stored(storage_dir)] == ["Good"]

    def test_catalog_write_failure_leaves_no_orphan_files(self, storage_dir, tmp_path, png_bytes):
        source = tmp_path / "incoming"
        source.mkdir()
        (source / "a.png").write_bytes(png_bytes)
        (source / "b.png").write_bytes(png_bytes)

        failing = AsyncMock(side_effect=StorageFailureError("Failed to save photo data"))
        with patch.object(CatalogStore, "mutate", failing):
            result = runner.invoke(app, ["import-photos", str(source)])

        assert result.exit_code == 1
        assert failing.await_count == 2
        uploads = storage_dir / "public" / "uploads"
        assert not uploads.exists() or list(uploads.iterdir()) == []

    def test_empty_directory(self, storage_dir, tmp_path):
        source = tmp_path / "empty"
        source.mkdir()

        result = runner.invoke(app, ["import-photos", str(source)])

        assert result.exit_code == 0
        assert not (storage_dir / "data" / "photos.json").exists()


class TestCatalogCommands:
    def test_seed_defaults_then_sync(self, storage_dir):
        assert runner.invoke(app, ["seed-defaults"]).exit_code == 0
        assert len(_stored(storage_dir)) == 9

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0
        assert "0 of 9 photos are served" in result.output
        # sync reports but never rewrites the document
        assert len(_stored(storage_dir)) == 9

    def test_list(self, storage_dir):
        runner.invoke(app, ["seed-defaults"])

        result = runner.invoke(app, ["list", "--category", "Mountains"])

        assert result.exit_code == 0

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Barelands CLI version" in result.output


class TestHelpers:
    @pytest.mark.parametrize(
        "filename, title",
        [
            ("passo-giau_vertical.jpg", "Passo Giau Vertical"),
            ("nara.png", "Nara"),
            ("greek--coast__2.webp", "Greek Coast 2"),
        ],
    )
    def test_title_from_filename(self, filename, title):
        assert title_from_filename(filename) == title

    def test_find_image_files(self, tmp_path):
        for name in ("b.webp", "a.jpeg", "c.gif", "d.PNG"):
            (tmp_path / name).write_bytes(b"")
        (tmp_path / "folder.jpg").mkdir()

        assert [path.name for path in find_image_files(tmp_path)] == ["a.jpeg", "b.webp", "d.PNG"]
