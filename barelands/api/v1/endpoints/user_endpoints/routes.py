from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.dependencies import get_settings
from barelands.api.v1.endpoints.user_endpoints.core_functions import (
    _admin_from_token,
    _check_admin_credentials,
    create_access_token,
)
from barelands.api.v1.errors import UnauthenticatedError
from barelands.models.models.users import AdminUser, Token
from barelands.version import get_api_version

auth_endpoint_router = APIRouter()

# auto_error=False so that a missing token renders as our own 401 error body
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"/api/{get_api_version()}/auth/login", auto_error=False
)


async def get_current_admin(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AdminUser:
    """Returns the admin authenticated by the bearer token, or raises a 401."""
    if token is None:
        raise UnauthenticatedError("Authentication required")
    return _admin_from_token(settings.auth, token)


@auth_endpoint_router.post("/login", response_model=Token)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Token:
    """Exchange the admin e-mail and password for a bearer token."""
    if not _check_admin_credentials(settings.auth, form_data.username, form_data.password):
        raise UnauthenticatedError("Invalid credentials")

    logger.info(f"Admin {form_data.username} logged in")
    return create_access_token(settings.auth, settings.auth.admin_email)


@auth_endpoint_router.get("/me", response_model=AdminUser)
async def me(current_admin: Annotated[AdminUser, Depends(get_current_admin)]) -> AdminUser:
    return current_admin
