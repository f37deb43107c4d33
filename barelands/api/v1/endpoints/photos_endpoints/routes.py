from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.dependencies import Services, get_services, get_settings
from barelands.api.v1.endpoints.photos_endpoints.core_functions import (
    _create_photo,
    _delete_photo,
    _filter_photos,
    _served_photos,
    _toggle_featured,
    _update_photo,
)
from barelands.api.v1.endpoints.user_endpoints.routes import get_current_admin
from barelands.api.v1.errors import InvalidRequestError, NotFoundError
from barelands.api.v1.services.image_assets import ImagePayload, decode_image_payload
from barelands.models.models.photos import (
    PhotoFeatureRequest,
    PhotoIdRequest,
    PhotoUpdateRequest,
    PhotoUploadRequest,
    photo_categories,
)
from barelands.models.models.users import AdminUser

photos_endpoint_router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _validate_upload(fields: dict) -> PhotoUploadRequest:
    try:
        return PhotoUploadRequest.model_validate(fields)
    except ValidationError as e:
        raise InvalidRequestError.from_errors(
            e.errors(), message="Missing or invalid photo fields"
        )


async def _parse_form_upload(request: Request) -> tuple[PhotoUploadRequest, ImagePayload | None]:
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}

    image = form.get("image")
    payload = None
    if isinstance(image, UploadFile):
        data = await image.read()
        logger.debug(
            f"Image file details: name={image.filename} type={image.content_type} size={len(data)}"
        )
        payload = decode_image_payload(data, content_type=image.content_type, filename=image.filename)
    elif fields.get("image_url"):
        fields["image"] = fields["image_url"]

    return _validate_upload(fields), payload


async def _parse_json_upload(request: Request) -> PhotoUploadRequest:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError("Invalid form data")
    if not isinstance(body, dict):
        raise InvalidRequestError("Invalid form data")
    return _validate_upload(body)


@photos_endpoint_router.get("")
async def list_photos(
    category: str | None = Query(default=None),
    featured: bool | None = Query(default=None),
    services: Services = Depends(get_services),
):
    """Served catalog, newest first, optionally filtered by category and featured flag."""
    photos = _filter_photos(await _served_photos(services), category, featured)
    return {
        "success": True,
        "photos": [photo.to_json() for photo in photos],
        "count": len(photos),
    }


@photos_endpoint_router.get("/categories")
async def list_categories():
    return {"success": True, "categories": photo_categories()}


@photos_endpoint_router.get("/featured")
async def list_featured_photos(services: Services = Depends(get_services)):
    photos = _filter_photos(await _served_photos(services), featured=True)
    return {
        "success": True,
        "photos": [photo.to_json() for photo in photos],
        "count": len(photos),
    }


@photos_endpoint_router.get("/sync")
async def sync_photos(services: Services = Depends(get_services)):
    """
    Reload the catalog from disk, drop records with missing images from the
    served view and revalidate every page.

    Public: used as a health check.
    """
    await services.synchronizer.sync()
    report = services.synchronizer.last_report
    revalidation = await services.synchronizer.invalidate()
    return {
        "success": True,
        "message": "Photos synchronized and all pages revalidated",
        **report.to_dict(),
        "revalidation": revalidation,
    }


@photos_endpoint_router.post("/upload")
async def upload_photo(
    request: Request,
    current_admin: AdminUser = Depends(get_current_admin),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    """
    Create a photo from a multipart form (``image`` file or ``image_url``) or
    a JSON body whose ``image`` is a data URI or an external URL.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        upload, payload = await _parse_form_upload(request)
    else:
        upload, payload = await _parse_json_upload(request), None

    record, revalidation = await _create_photo(
        services, upload, payload, asset_timeout=settings.performance.asset_timeout
    )
    logger.info(f"Upload by {current_admin.email}: {record.id}")
    return {
        "success": True,
        "photo": record.to_json(),
        "message": "Photo uploaded successfully",
        "revalidation": revalidation,
    }


@photos_endpoint_router.post("/update")
async def update_photo(
    update: PhotoUpdateRequest,
    current_admin: AdminUser = Depends(get_current_admin),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    record, revalidation = await _update_photo(
        services, update, asset_timeout=settings.performance.asset_timeout
    )
    return {
        "success": True,
        "message": "Photo updated successfully",
        "photo": record.to_json(),
        "revalidation": revalidation,
    }


@photos_endpoint_router.post("/delete")
async def delete_photo(
    delete_request: PhotoIdRequest,
    current_admin: AdminUser = Depends(get_current_admin),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    removed, asset_deleted, revalidation = await _delete_photo(
        services, delete_request.id, asset_timeout=settings.performance.asset_timeout
    )
    return {
        "success": True,
        "message": "Photo deleted successfully",
        "photoId": removed.id,
        "assetDeleted": asset_deleted,
        "revalidation": revalidation,
    }


@photos_endpoint_router.post("/feature")
async def feature_photo(
    feature_request: PhotoFeatureRequest,
    current_admin: AdminUser = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    record, revalidation = await _toggle_featured(
        services, feature_request.id, feature_request.featured
    )
    return {
        "success": True,
        "message": "Featured status updated successfully",
        "photoId": record.id,
        "featured": record.featured,
        "revalidation": revalidation,
    }


@photos_endpoint_router.get("/{photo_id}")
async def get_photo(photo_id: str, services: Services = Depends(get_services)):
    for photo in await _served_photos(services):
        if photo.id == photo_id:
            return {"success": True, "photo": photo.to_json()}
    raise NotFoundError("Photo not found", details={"id": photo_id})
