from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from barelands.api.v1.configs.config import settings as default_settings
from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.dependencies import Services, build_services
from barelands.api.v1.endpoints.routers import router
from barelands.api.v1.errors import BarelandsError, InvalidRequestError
from barelands.api.v1.services.catalog_store import merge_defaults
from barelands.models.defaults import default_photos
from barelands.version import get_api_version, get_version


async def seed_catalog(services: Services, settings: Settings) -> bool:
    """Write the built-in photo set when no catalog document exists yet."""
    if not settings.storage.seed_defaults or services.store.data_path.exists():
        return False

    merged = merge_defaults(default_photos(), await services.store.load())
    saved = await services.store.save(merged)
    if saved:
        logger.info(f"Seeded {services.store.data_path} with {len(merged)} default photos")
    else:
        logger.error(f"Could not seed {services.store.data_path} with the default photos")
    return saved


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: Services = app.state.services
    await seed_catalog(services, app.state.settings)

    count = await services.synchronizer.sync()
    logger.info(f"Serving {count} photos from {services.store.data_path}")

    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Barelands API",
        version=get_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.fastapi.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_prefix = f"/api/{get_api_version()}"
    app.include_router(router, prefix=api_prefix)

    @app.exception_handler(BarelandsError)
    async def barelands_exception_handler(request: Request, exc: BarelandsError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.kind}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = InvalidRequestError.from_errors(exc.errors())
        logger.info(f"{request.method} {request.url.path} -> 400 validation_error")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        details = str(exc) if settings.fastapi.dev_mode else None
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "kind": "internal_error",
                "message": "Internal server error",
                "details": details,
            },
        )

    return app


app = create_app()
