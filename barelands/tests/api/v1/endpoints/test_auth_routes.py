from datetime import datetime, timedelta, timezone

import jwt
import pytest

from barelands.api.v1.configs.settings_models import AuthConfig
from barelands.api.v1.endpoints.user_endpoints.core_functions import (
    _check_admin_credentials,
    _hash_password,
    _verify_password,
    create_access_token,
    decode_token,
)
from barelands.api.v1.errors import UnauthenticatedError
from barelands.tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD, JWT_SECRET

API = "/api/v1/auth"


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = _hash_password("hunter22")

        assert hashed.startswith("$2")
        assert _verify_password(hashed, "hunter22") is True
        assert _verify_password(hashed, "hunter23") is False

    def test_invalid_stored_hash_is_a_mismatch(self):
        assert _verify_password("not-a-bcrypt-hash", "anything") is False

    def test_no_configured_hash_rejects_everything(self, tmp_path):
        auth = AuthConfig(admin_email=ADMIN_EMAIL, admin_password_hash=None, keys_dir=tmp_path)

        assert _check_admin_credentials(auth, ADMIN_EMAIL, "") is False
        assert _check_admin_credentials(auth, ADMIN_EMAIL, ADMIN_PASSWORD) is False

    def test_email_match_is_case_insensitive(self, test_settings):
        assert _check_admin_credentials(test_settings.auth, "ADMIN@example.com", ADMIN_PASSWORD)


class TestTokens:
    def test_round_trip(self, test_settings):
        token = create_access_token(test_settings.auth, ADMIN_EMAIL)

        claims = decode_token(test_settings.auth, token.access_token)

        assert claims.sub == ADMIN_EMAIL
        lifetime = claims.exp - claims.iat
        assert timedelta(hours=23) < lifetime <= timedelta(hours=24)

    def test_expired_token_rejected(self, test_settings):
        now = datetime.now(timezone.utc)
        expired = jwt.encode(
            {"sub": ADMIN_EMAIL, "exp": now - timedelta(minutes=1), "iat": now - timedelta(hours=1)},
            JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError, match="expired"):
            decode_token(test_settings.auth, expired)

    def test_token_for_other_subject_rejected(self, test_settings):
        now = datetime.now(timezone.utc)
        other = jwt.encode(
            {"sub": "someone@example.com", "exp": now + timedelta(hours=1), "iat": now},
            JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError):
            decode_token(test_settings.auth, other)

    def test_token_signed_with_other_secret_rejected(self, test_settings):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {"sub": ADMIN_EMAIL, "exp": now + timedelta(hours=1), "iat": now},
            "another-secret-0123456789abcdef0123456789abcdef",
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError):
            decode_token(test_settings.auth, forged)


class TestAuthRoutes:
    def test_login_success(self, test_client):
        response = test_client.post(
            f"{API}/login", data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]

        me = test_client.get(
            f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == ADMIN_EMAIL

    @pytest.mark.parametrize(
        "username, password",
        [(ADMIN_EMAIL, "wrong-password"), ("intruder@example.com", ADMIN_PASSWORD)],
    )
    def test_login_failure(self, test_client, username, password):
        response = test_client.post(f"{API}/login", data={"username": username, "password": password})

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "kind": "unauthenticated",
            "message": "Invalid credentials",
            "details": None,
        }

    def test_me_without_token(self, test_client):
        response = test_client.get(f"{API}/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"
