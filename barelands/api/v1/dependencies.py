"""
Per-application service container.

``create_app`` builds one ``Services`` instance from the settings and keeps it
on ``app.state``; handlers reach it through the ``get_services`` dependency.
"""

from dataclasses import dataclass

import boto3
from fastapi import Request

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.configs.settings_models import Settings
from barelands.api.v1.services.catalog_store import CatalogStore
from barelands.api.v1.services.image_assets import ImageStore, LocalImageStore, S3ImageStore
from barelands.api.v1.services.mailer import Mailer
from barelands.api.v1.services.revalidation import (
    Revalidator,
    StalePathRegistry,
    WebhookRevalidator,
)
from barelands.api.v1.services.synchronizer import CatalogSynchronizer


@dataclass
class Services:
    store: CatalogStore
    assets: ImageStore
    synchronizer: CatalogSynchronizer
    stale_paths: StalePathRegistry
    mailer: Mailer


def build_image_store(settings: Settings) -> ImageStore:
    if settings.storage.backend == "s3":
        s3 = settings.s3
        client = boto3.client(
            "s3",
            endpoint_url=s3.endpoint_url,
            aws_access_key_id=s3.access_key,
            aws_secret_access_key=s3.secret_key,
            region_name=s3.region,
        )
        logger.info(f"Images stored in bucket {s3.bucket} ({s3.base_url})")
        return S3ImageStore(client, s3.bucket, s3.base_url, key_prefix=s3.key_prefix)

    logger.info(f"Images stored under {settings.storage.uploads_path}")
    return LocalImageStore(settings.storage.public_path, settings.storage.uploads_folder)


def build_services(settings: Settings) -> Services:
    store = CatalogStore(settings.storage.data_path)
    assets = build_image_store(settings)

    stale_paths = StalePathRegistry()
    revalidators: list[Revalidator] = [stale_paths]
    if settings.revalidation.webhook_url:
        revalidators.append(
            WebhookRevalidator(
                settings.revalidation.webhook_url,
                secret=settings.revalidation.secret,
                timeout=settings.performance.revalidation_timeout,
            )
        )

    synchronizer = CatalogSynchronizer(
        store,
        assets,
        revalidators=revalidators,
        default_paths=settings.revalidation.paths,
        revalidation_timeout=settings.performance.revalidation_timeout,
        asset_timeout=settings.performance.asset_timeout,
    )
    mailer = Mailer(settings.mail, timeout=settings.performance.mail_timeout)
    return Services(
        store=store,
        assets=assets,
        synchronizer=synchronizer,
        stale_paths=stale_paths,
        mailer=mailer,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_services(request: Request) -> Services:
    return request.app.state.services
