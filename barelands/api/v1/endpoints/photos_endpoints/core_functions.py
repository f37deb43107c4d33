"""
Photo mutations, shared by the HTTP routes and the CLI.

Each mutation follows the same order: validate, store the asset (if any),
persist the catalog change, then refresh the served view and invalidate
rendered pages. Only failures up to and including persistence turn into
errors; anything after that is logged and reported in the response.
"""

import asyncio

from botocore.exceptions import BotoCoreError, ClientError

from barelands.api.v1.configs.logging_init import format_pydantic, logger
from barelands.api.v1.dependencies import Services
from barelands.api.v1.errors import InvalidRequestError, NotFoundError, StorageFailureError
from barelands.api.v1.services.image_assets import ImagePayload, decode_data_uri
from barelands.models.models.photos import (
    ALL_CATEGORIES,
    PhotoRecord,
    PhotoUpdateRequest,
    PhotoUploadRequest,
)

ASSET_ERRORS = (OSError, BotoCoreError, ClientError)


def _filter_photos(
    photos: list[PhotoRecord], category: str | None = None, featured: bool | None = None
) -> list[PhotoRecord]:
    if category and category != ALL_CATEGORIES:
        photos = [photo for photo in photos if photo.category == category]
    if featured is not None:
        photos = [photo for photo in photos if photo.featured == featured]
    return photos


async def _served_photos(services: Services) -> list[PhotoRecord]:
    """Re-synchronize, then return the served view (newest first)."""
    await services.synchronizer.sync()
    return services.synchronizer.photos()


async def _store_asset(services: Services, payload: ImagePayload, timeout: float) -> str:
    try:
        return await asyncio.wait_for(services.assets.store(payload), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Storing image timed out after {timeout}s")
        raise StorageFailureError("Failed to save image file", details={"reason": "timeout"})
    except ASSET_ERRORS as e:
        logger.error(f"Storing image failed: {e}")
        raise StorageFailureError("Failed to save image file", details={"reason": str(e)})


async def _discard_asset(services: Services, public_path: str, timeout: float) -> bool:
    """Best-effort asset removal; never raises."""
    try:
        return await asyncio.wait_for(services.assets.delete(public_path), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Deleting image {public_path} timed out after {timeout}s")
    except ASSET_ERRORS as e:
        logger.warning(f"Failed to delete image file {public_path}: {e}")
    return False


def _resolve_image_reference(image: str | None) -> tuple[ImagePayload | None, str | None]:
    """Split an ``image`` field into bytes to store or an external reference to keep as is."""
    if not image or not image.strip():
        return None, None
    image = image.strip()
    if image.startswith("data:"):
        return decode_data_uri(image), None
    if image.startswith(("http://", "https://", "/")):
        return None, image
    raise InvalidRequestError(
        "Image must be a data URI, an absolute URL or a root-relative path",
        details={"image": image[:100]},
    )


async def _create_photo(
    services: Services,
    upload: PhotoUploadRequest,
    payload: ImagePayload | None = None,
    asset_timeout: float = 30.0,
) -> tuple[PhotoRecord, dict]:
    """
    Store the image (when bytes are supplied) and add a new record to the catalog.

    Returns:
        The created record and the revalidation outcome.
    """
    external = None
    if payload is None:
        payload, external = _resolve_image_reference(upload.image)
    if payload is None and external is None:
        raise InvalidRequestError("No image file provided")

    image = external or await _store_asset(services, payload, asset_timeout)

    record = PhotoRecord(
        title=upload.title,
        category=upload.category,
        image=image,
        description=upload.description,
        location=upload.location,
        featured=upload.featured,
    )
    try:
        await services.store.upsert(record)
    except StorageFailureError:
        if external is None:
            await _discard_asset(services, image, asset_timeout)
        raise

    logger.info(f"Photo {record.id} uploaded ({record.title}, {record.category})")
    logger.debug(format_pydantic(record))
    revalidation = await services.synchronizer.after_mutation()
    return record, revalidation


async def _update_photo(
    services: Services, update: PhotoUpdateRequest, asset_timeout: float = 30.0
) -> tuple[PhotoRecord, dict]:
    """
    Apply the fields present in ``update``.

    A new ``image`` follows the upload rules: a data URI is stored as a new
    asset, a URL or root-relative path is kept as is. The replaced managed
    asset is deleted best-effort once the change is persisted.
    """
    changes = update.changes()
    stored = None
    if "image" in changes:
        payload, external = _resolve_image_reference(changes["image"])
        if payload is not None:
            stored = await _store_asset(services, payload, asset_timeout)
        changes["image"] = external or stored

    previous = await services.store.get(update.id)
    try:
        updated = await services.store.update(update.id, changes)
    except (InvalidRequestError, StorageFailureError):
        if stored is not None:
            await _discard_asset(services, stored, asset_timeout)
        raise
    if updated is None:
        if stored is not None:
            await _discard_asset(services, stored, asset_timeout)
        raise NotFoundError("Photo not found", details={"id": update.id})

    if (
        previous is not None
        and previous.image != updated.image
        and services.assets.is_managed(previous.image)
    ):
        await _discard_asset(services, previous.image, asset_timeout)

    revalidation = await services.synchronizer.after_mutation()
    return updated, revalidation


async def _delete_photo(
    services: Services, photo_id: str, asset_timeout: float = 30.0
) -> tuple[PhotoRecord, bool, dict]:
    """
    Remove the record, then best-effort delete its managed asset.

    Returns:
        The removed record, whether an asset file was deleted, and the revalidation outcome.
    """
    removed = await services.store.remove(photo_id)
    if removed is None:
        raise NotFoundError("Photo not found", details={"id": photo_id})

    asset_deleted = False
    if services.assets.is_managed(removed.image):
        asset_deleted = await _discard_asset(services, removed.image, asset_timeout)
        if not asset_deleted:
            logger.warning(f"Image file for photo {photo_id} was not deleted: {removed.image}")

    revalidation = await services.synchronizer.after_mutation()
    return removed, asset_deleted, revalidation


async def _toggle_featured(
    services: Services, photo_id: str, value: bool | None = None
) -> tuple[PhotoRecord, dict]:
    updated = await services.store.set_featured(photo_id, value)
    if updated is None:
        raise NotFoundError("Photo not found", details={"id": photo_id})
    revalidation = await services.synchronizer.after_mutation()
    return updated, revalidation
