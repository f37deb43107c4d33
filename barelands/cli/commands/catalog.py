import asyncio
import itertools
import re
from pathlib import Path
from typing import Annotated, Optional

import typer

from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.dependencies import Services, build_services
from barelands.api.v1.endpoints.photos_endpoints.core_functions import _discard_asset
from barelands.api.v1.errors import BarelandsError, StorageFailureError
from barelands.api.v1.services.catalog_store import merge_defaults, sort_newest_first
from barelands.api.v1.services.image_assets import payload_from_bytes
from barelands.cli.cli_logging import logger
from barelands.cli.utils.rich_utils import (
    rich_print_checked_statement,
    rich_print_command_usage,
    rich_print_photos_table,
)
from barelands.models.defaults import default_photos
from barelands.models.models.photos import PhotoCategory, PhotoRecord


IMPORT_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


def _services() -> Services:
    # Fresh settings so that the environment of this invocation applies
    return build_services(Settings())


def title_from_filename(filename: str) -> str:
    """``passo-giau_vertical.jpg`` -> ``Passo Giau Vertical``."""
    stem = re.sub(r"[-_]+", " ", Path(filename).stem).strip()
    return re.sub(r"\b\w", lambda match: match.group().upper(), stem)


def find_image_files(directory: Path) -> list[Path]:
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in IMPORT_EXTENSIONS
    )


async def _import_directory(
    services: Services,
    directory: Path,
    category: Optional[PhotoCategory] = None,
    location: str = "",
    asset_timeout: float = 30.0,
) -> tuple[list[PhotoRecord], list[str]]:
    """
    Store every image of ``directory`` and add one record per file.

    Without ``category`` the fixed categories are assigned in turn.

    Returns:
        The created records and the names of the files that could not be imported.
    """
    categories = itertools.cycle([category] if category else list(PhotoCategory))
    imported: list[PhotoRecord] = []
    failed: list[str] = []

    for path in find_image_files(directory):
        try:
            payload = payload_from_bytes(path.read_bytes(), filename=path.name)
            image = await services.assets.store(payload)
        except (OSError, BarelandsError) as e:
            logger.error(f"Could not import {path}: {e}")
            failed.append(path.name)
            continue

        title = title_from_filename(path.name)
        record = PhotoRecord(
            title=title or path.stem,
            category=next(categories),
            image=image,
            description=f"Beautiful landscape photograph of {title}",
            location=location,
        )
        try:
            await services.store.upsert(record)
        except StorageFailureError as e:
            logger.error(f"Could not add {path} to the catalog: {e}")
            await _discard_asset(services, image, asset_timeout)
            failed.append(path.name)
            continue
        imported.append(record)

    if imported:
        await services.synchronizer.sync()
    return imported, failed


def import_photos(
    directory: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=False, dir_okay=True, help="Folder of images"),
    ],
    category: Annotated[
        Optional[PhotoCategory],
        typer.Option("--category", "-c", help="Category for every imported photo"),
    ] = None,
    location: Annotated[str, typer.Option("--location", "-l", help="Location text")] = "",
):
    """
    Copy .jpg/.jpeg/.png/.webp files into the image store and add them to the catalog.
    """
    rich_print_command_usage("import-photos")
    settings = Settings()
    services = build_services(settings)

    if not find_image_files(directory):
        rich_print_checked_statement(f"No image files found in {directory}", "warning")
        return

    imported, failed = asyncio.run(
        _import_directory(
            services, directory, category, location, settings.performance.asset_timeout
        )
    )
    if imported:
        rich_print_photos_table(imported, title=f"Imported from {directory}")
    rich_print_checked_statement(f"Imported {len(imported)} photos", "success")
    if failed:
        rich_print_checked_statement(f"Skipped {len(failed)} files: {', '.join(failed)}", "error")
        raise typer.Exit(code=1)


def seed_defaults():
    """
    Merge the built-in photo set into the catalog; stored records win.
    """
    rich_print_command_usage("seed-defaults")
    services = _services()

    async def _seed() -> tuple[int, bool]:
        merged = merge_defaults(default_photos(), await services.store.load())
        return len(merged), await services.store.save(merged)

    count, saved = asyncio.run(_seed())
    if not saved:
        rich_print_checked_statement(
            f"Could not write {services.store.data_path}", "error", exit=False
        )
        raise typer.Exit(code=1)
    rich_print_checked_statement(f"Catalog now holds {count} photos", "success")


def sync(
    revalidate: Annotated[
        bool, typer.Option("--revalidate", help="Also notify the configured revalidators")
    ] = False,
):
    """
    Check every record against its image and report the ones that would be dropped.
    """
    rich_print_command_usage("sync")
    services = _services()

    async def _sync() -> Optional[dict]:
        await services.synchronizer.sync()
        if revalidate:
            return await services.synchronizer.invalidate()
        return None

    revalidation = asyncio.run(_sync())
    report = services.synchronizer.last_report
    rich_print_checked_statement(
        f"{report.photo_count} of {report.original_count} photos are served", "success"
    )
    for photo_id in report.dropped:
        rich_print_checked_statement(f"Missing image for photo {photo_id}", "warning")
    if revalidation is not None:
        rich_print_checked_statement(f"Revalidated: {revalidation['success']}", "info")
        if revalidation["failed"]:
            rich_print_checked_statement(f"Failed: {revalidation['failed']}", "error")


def list_photos(
    category: Annotated[
        Optional[PhotoCategory], typer.Option("--category", "-c", help="Only this category")
    ] = None,
):
    """
    Show the stored catalog, newest first.
    """
    services = _services()
    photos = sort_newest_first(asyncio.run(services.store.load()))
    if category:
        photos = [photo for photo in photos if photo.category == category.value]
    rich_print_photos_table(photos, title=f"{len(photos)} photos")


def register_catalog_commands(app: typer.Typer):
    app.command("import-photos")(import_photos)
    app.command("seed-defaults")(seed_defaults)
    app.command("sync")(sync)
    app.command("list")(list_photos)
