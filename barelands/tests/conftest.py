from io import BytesIO

import bcrypt
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from barelands.api.main import create_app
from barelands.api.v1.configs.settings_models import (
    AuthConfig,
    MailConfig,
    RevalidationConfig,
    Settings,
    StorageConfig,
)
from barelands.api.v1.endpoints.user_endpoints.core_functions import create_access_token

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery-staple"
JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef0123"
REVALIDATION_SECRET = "revalidate-me"


@pytest.fixture(scope="session")
def admin_password_hash():
    """bcrypt hash of ADMIN_PASSWORD, computed once per session."""
    return bcrypt.hashpw(ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture
def png_bytes():
    """A small but valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(120, 80, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(20, 80, 140)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path, admin_password_hash):
    """Settings pointing every path at a temporary directory."""
    return Settings(
        storage=StorageConfig(base_dir=tmp_path, seed_defaults=False),
        auth=AuthConfig(
            admin_email=ADMIN_EMAIL,
            admin_password_hash=admin_password_hash,
            jwt_secret_env=JWT_SECRET,
            keys_dir=tmp_path / "keys",
        ),
        mail=MailConfig(smtp_password=None),
        revalidation=RevalidationConfig(secret=REVALIDATION_SECRET, webhook_url=None),
    )


@pytest.fixture
def test_app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def services(test_app):
    return test_app.state.services


@pytest.fixture
def test_client(test_app):
    """Test client with the application lifespan running."""
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def auth_headers(test_settings):
    token = create_access_token(test_settings.auth, ADMIN_EMAIL)
    return {"Authorization": f"Bearer {token.access_token}"}
