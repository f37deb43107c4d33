import secrets
import time

from fastapi import APIRouter, Depends, Query

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.dependencies import Services, get_services, get_settings
from barelands.api.v1.errors import UnauthenticatedError

revalidate_endpoint_router = APIRouter()


def _check_secret(settings: Settings, secret: str | None, path: str) -> None:
    expected = settings.revalidation.secret
    if not expected or not secret or not secrets.compare_digest(secret, expected):
        logger.warning(f"Rejected revalidation request for {path}")
        raise UnauthenticatedError("Invalid revalidation secret")


@revalidate_endpoint_router.get("")
async def revalidate_path(
    path: str = Query(default="/"),
    secret: str | None = Query(default=None),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    """Mark ``path`` stale; gated by the configured revalidation secret."""
    _check_secret(settings, secret, path)
    services.stale_paths.mark(path)
    logger.info(f"Revalidated {path}")
    return {"revalidated": True, "now": int(time.time() * 1000), "path": path}


@revalidate_endpoint_router.get("/stale")
async def list_stale_paths(services: Services = Depends(get_services)):
    """Paths invalidated since the rendering layer last consumed them."""
    return {"success": True, "stale": services.stale_paths.stale_paths()}


@revalidate_endpoint_router.post("/consume")
async def consume_stale_path(
    path: str = Query(...),
    secret: str | None = Query(default=None),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    _check_secret(settings, secret, path)
    return {"success": True, "path": path, "consumed": services.stale_paths.consume(path)}
