from fastapi import APIRouter

from barelands.api.v1.endpoints.contact_endpoints.routes import contact_endpoint_router
from barelands.api.v1.endpoints.photos_endpoints.routes import photos_endpoint_router
from barelands.api.v1.endpoints.revalidate_endpoints.routes import revalidate_endpoint_router
from barelands.api.v1.endpoints.user_endpoints.routes import auth_endpoint_router

router = APIRouter()


router.include_router(
    photos_endpoint_router,
    prefix="/photos",
    tags=["Photos"],
)
router.include_router(
    contact_endpoint_router,
    tags=["Contact"],
)
router.include_router(
    revalidate_endpoint_router,
    prefix="/revalidate",
    tags=["Revalidation"],
)
router.include_router(
    auth_endpoint_router,
    prefix="/auth",
    tags=["Authentication"],
)
