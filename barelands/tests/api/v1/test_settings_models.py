import os
from contextlib import contextmanager
from pathlib import Path

from barelands.api.v1.configs.settings_models import (
    AuthConfig,
    FastAPIConfig,
    MailConfig,
    PerformanceConfig,
    RevalidationConfig,
    S3Config,
    Settings,
    StorageConfig,
)


@contextmanager
def env_vars(env_dict):
    """Context manager for temporarily setting environment variables."""
    original = {key: os.environ.get(key) for key in env_dict}
    try:
        for key, value in env_dict.items():
            if value is not None:
                os.environ[key] = value
            elif key in os.environ:
                del os.environ[key]
        yield
    finally:
        for key, value in original.items():
            if value is not None:
                os.environ[key] = value
            elif key in os.environ:
                del os.environ[key]


class TestFastAPIConfig:
    def test_default_values(self):
        with env_vars({"BARELANDS_FASTAPI_PORT": None, "BARELANDS_FASTAPI_WORKERS": None}):
            config = FastAPIConfig()

        assert config.port == 8058
        assert config.workers == 1
        assert config.dev_mode is False

    def test_env_override(self):
        with env_vars({"BARELANDS_FASTAPI_PORT": "9000", "BARELANDS_FASTAPI_DEV_MODE": "true"}):
            config = FastAPIConfig()

        assert config.port == 9000
        assert config.dev_mode is True


class TestStorageConfig:
    def test_paths_derive_from_base_dir(self, tmp_path):
        config = StorageConfig(base_dir=tmp_path)

        assert config.data_path == tmp_path / "data" / "photos.json"
        assert config.public_path == tmp_path / "public"
        assert config.uploads_path == tmp_path / "public" / "uploads"

    def test_seeding_is_opt_in(self, tmp_path):
        with env_vars({"BARELANDS_STORAGE_SEED_DEFAULTS": None}):
            config = StorageConfig(base_dir=tmp_path)

        assert config.seed_defaults is False

    def test_env_override(self, tmp_path):
        with env_vars(
            {
                "BARELANDS_STORAGE_BASE_DIR": str(tmp_path),
                "BARELANDS_STORAGE_DATA_FILE": "catalog.json",
                "BARELANDS_STORAGE_BACKEND": "s3",
            }
        ):
            config = StorageConfig()

        assert config.data_path == Path(tmp_path) / "catalog.json"
        assert config.backend == "s3"


class TestS3Config:
    def test_base_url_prefers_public_url(self):
        assert S3Config(public_url="https://cdn.example.com/").base_url == "https://cdn.example.com"

    def test_base_url_from_endpoint(self):
        config = S3Config(bucket="photos", endpoint_url="http://minio:9000")

        assert config.base_url == "http://minio:9000/photos"

    def test_base_url_aws_default(self):
        config = S3Config(bucket="photos", region="eu-west-1", endpoint_url=None, public_url=None)

        assert config.base_url == "https://photos.s3.eu-west-1.amazonaws.com"


class TestAuthConfig:
    def test_secret_from_environment(self, tmp_path):
        with env_vars({"BARELANDS_AUTH_JWT_SECRET": "from-env"}):
            config = AuthConfig(keys_dir=tmp_path)

        assert config.jwt_secret == "from-env"
        assert not (tmp_path / "jwt_secret.key").exists()

    def test_secret_generated_and_reused(self, tmp_path):
        with env_vars({"BARELANDS_AUTH_JWT_SECRET": None}):
            first = AuthConfig(keys_dir=tmp_path)
            second = AuthConfig(keys_dir=tmp_path)

            assert first.jwt_secret == second.jwt_secret
        assert (tmp_path / "jwt_secret.key").exists()

    def test_defaults(self):
        with env_vars({"BARELANDS_AUTH_ADMIN_PASSWORD_HASH": None}):
            config = AuthConfig()

        assert config.admin_password_hash is None
        assert config.token_lifetime_hours == 24
        assert config.jwt_algorithm == "HS256"


class TestOtherConfigs:
    def test_mail_configured_only_with_password(self):
        assert MailConfig(smtp_password=None).configured is False
        assert MailConfig(smtp_password="pw").configured is True

    def test_revalidation_default_paths(self):
        with env_vars({"BARELANDS_REVALIDATION_PATHS": None}):
            config = RevalidationConfig()

        assert config.paths == ["/", "/admin", "/news", "/prints", "/portfolio"]

    def test_performance_timeouts_positive(self):
        config = PerformanceConfig()

        assert config.asset_timeout > 0
        assert config.revalidation_timeout > 0


class TestSettings:
    def test_aggregates_sections(self, tmp_path):
        settings = Settings(storage=StorageConfig(base_dir=tmp_path))

        assert settings.storage.base_dir == tmp_path
        assert isinstance(settings.auth, AuthConfig)
        assert settings.logging.verbosity_level
