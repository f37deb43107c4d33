from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    return Path(__file__).parent.parent.parent.parent.parent


class FastAPIConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8058)
    workers: int = Field(default=1)
    dev_mode: bool = Field(default=False)
    reload: bool = Field(default=False)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_prefix="BARELANDS_FASTAPI_")


class StorageConfig(BaseSettings):
    """Locations of the catalog document and the managed upload directory."""

    base_dir: Path = Field(default_factory=_project_root)
    data_file: str = Field(default="data/photos.json")
    public_dir: str = Field(default="public")
    uploads_folder: str = Field(default="uploads")
    seed_defaults: bool = Field(
        default=False,
        description=(
            "Seed the catalog with the built-in photo set when the document is missing; "
            "its images must already be present in the upload directory"
        ),
    )
    backend: Literal["local", "s3"] = Field(default="local")

    model_config = SettingsConfigDict(env_prefix="BARELANDS_STORAGE_")

    @computed_field
    @property
    def data_path(self) -> Path:
        return self.base_dir / self.data_file

    @computed_field
    @property
    def public_path(self) -> Path:
        return self.base_dir / self.public_dir

    @computed_field
    @property
    def uploads_path(self) -> Path:
        return self.public_path / self.uploads_folder


class S3Config(BaseSettings):
    """Hosted image bucket, used when the storage backend is ``s3``."""

    bucket: str = Field(default="barelands-photos")
    endpoint_url: Optional[str] = Field(default=None)
    access_key: Optional[str] = Field(default=None)
    secret_key: Optional[str] = Field(default=None)
    region: str = Field(default="us-east-1")
    public_url: Optional[str] = Field(default=None)
    key_prefix: str = Field(default="uploads")

    model_config = SettingsConfigDict(env_prefix="BARELANDS_S3_")

    @property
    def base_url(self) -> str:
        """Public URL under which bucket objects are served."""
        if self.public_url:
            return self.public_url.rstrip("/")
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"


class AuthConfig(BaseSettings):
    admin_email: str = Field(default="admin@barelands.vip")
    admin_password_hash: Optional[str] = Field(
        default=None, description="bcrypt hash of the admin password"
    )
    keys_dir: Path = Field(default_factory=lambda: _project_root() / "keys")
    jwt_secret_env: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    token_lifetime_hours: int = Field(default=24, ge=1)

    model_config = SettingsConfigDict(env_prefix="BARELANDS_AUTH_", case_sensitive=False)

    def __init__(self, **data):
        super().__init__(**data)

        if self.jwt_secret_env is None:
            import os

            self.jwt_secret_env = os.getenv("BARELANDS_AUTH_JWT_SECRET")

    @property
    def jwt_secret(self) -> str:
        """Signing secret from the environment, or loaded/generated under ``keys_dir``."""
        if self.jwt_secret_env:
            return self.jwt_secret_env

        from barelands.api.v1.key_utils import load_or_generate_jwt_secret

        return load_or_generate_jwt_secret(keys_dir=self.keys_dir)


class MailConfig(BaseSettings):
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)
    smtp_user: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    starttls: bool = Field(default=True)
    from_address: str = Field(default="noreply@barelands.vip")
    contact_address: str = Field(default="contact@barelands.vip")
    site_name: str = Field(default="Barelands Website")

    model_config = SettingsConfigDict(env_prefix="BARELANDS_MAIL_")

    @property
    def configured(self) -> bool:
        return bool(self.smtp_password)


class RevalidationConfig(BaseSettings):
    secret: Optional[str] = Field(default=None, description="Token gating the revalidate endpoint")
    paths: list[str] = Field(default_factory=lambda: ["/", "/admin", "/news", "/prints", "/portfolio"])
    webhook_url: Optional[str] = Field(
        default=None, description="Frontend hook called once per stale path"
    )

    model_config = SettingsConfigDict(env_prefix="BARELANDS_REVALIDATION_")


class PerformanceConfig(BaseSettings):
    """Timeouts (seconds) for the non-catalog steps of a mutation."""

    asset_timeout: float = Field(default=30.0, gt=0)
    revalidation_timeout: float = Field(default=5.0, gt=0)
    mail_timeout: float = Field(default=20.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="BARELANDS_PERFORMANCE_")


class LoggingConfig(BaseSettings):
    verbosity_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_prefix="BARELANDS_LOGGING_")


class Settings(BaseSettings):
    fastapi: FastAPIConfig = Field(default_factory=FastAPIConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    s3: S3Config = Field(default_factory=S3Config)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    revalidation: RevalidationConfig = Field(default_factory=RevalidationConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="BARELANDS_")
