"""
Image Asset Manager: stores and deletes the binary image behind a photo record.

Two backends share one contract:

- ``LocalImageStore`` writes files under ``<public>/<uploads>/`` and hands out
  root-relative paths such as ``/uploads/<uuid>.jpg``.
- ``S3ImageStore`` puts objects into a bucket and hands out absolute URLs under
  the bucket's public base URL.

Only references inside a store's managed namespace are ever deleted. Any
other reference (a built-in asset, a third-party image host) is treated as
externally hosted and always valid.
"""

import asyncio
import base64
import binascii
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from botocore.exceptions import ClientError
from PIL import Image, UnidentifiedImageError

from barelands.api.v1.configs.logging_init import logger
from barelands.api.v1.errors import InvalidRequestError

DATA_URI_PATTERN = re.compile(r"^data:([A-Za-z0-9.+/-]+);base64,(.+)$", re.DOTALL)

# MIME subtype -> file extension; other image subtypes use the subtype itself
MIME_EXTENSIONS = {
    "jpeg": "jpg",
    "jpg": "jpg",
    "pjpeg": "jpg",
    "png": "png",
    "gif": "gif",
    "webp": "webp",
    "svg+xml": "svg",
}

EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    @property
    def extension(self) -> str:
        subtype = self.mime_type.split("/", 1)[1].lower()
        return MIME_EXTENSIONS.get(subtype, re.sub(r"[^a-z0-9]", "", subtype) or "jpg")


def _validate_image(payload: ImagePayload) -> ImagePayload:
    """Reject payloads that are empty or do not decode as the image type they claim to be."""
    if not payload.mime_type.lower().startswith("image/"):
        raise InvalidRequestError(
            "Unsupported image type", details={"mime_type": payload.mime_type}
        )
    if not payload.data:
        raise InvalidRequestError("Image data is empty")

    if payload.mime_type.lower() == "image/svg+xml":
        if b"<svg" not in payload.data[:4096].lower():
            raise InvalidRequestError("Image data is not a valid SVG document")
        return payload

    try:
        with Image.open(BytesIO(payload.data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidRequestError(
            "Image data is not a recognized image encoding", details={"error": str(e)}
        )
    return payload


def decode_data_uri(data_uri: str) -> ImagePayload:
    """Decode ``data:<mime>;base64,<data>`` into a validated payload."""
    match = DATA_URI_PATTERN.match(data_uri.strip())
    if not match:
        raise InvalidRequestError("Invalid base64 image string")

    mime_type, encoded = match.groups()
    try:
        data = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError):
        raise InvalidRequestError("Invalid base64 image string")
    return _validate_image(ImagePayload(data=data, mime_type=mime_type.lower()))


def payload_from_bytes(
    data: bytes, content_type: str | None = None, filename: str | None = None
) -> ImagePayload:
    """Build a validated payload from raw bytes, guessing the type from the filename when needed."""
    mime_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not mime_type.startswith("image/") and filename:
        mime_type = EXTENSION_MIME_TYPES.get(Path(filename).suffix.lower(), mime_type)
    if not mime_type:
        mime_type = "application/octet-stream"
    return _validate_image(ImagePayload(data=data, mime_type=mime_type))


def decode_image_payload(
    source: str | bytes, content_type: str | None = None, filename: str | None = None
) -> ImagePayload:
    """Accept either a data URI or raw bytes (with the uploaded content type / filename)."""
    if isinstance(source, str):
        return decode_data_uri(source)
    return payload_from_bytes(source, content_type=content_type, filename=filename)


def generate_filename(payload: ImagePayload) -> str:
    return f"{uuid.uuid4()}.{payload.extension}"


class ImageStore(ABC):
    """Contract shared by the image storage backends."""

    @abstractmethod
    def is_managed(self, public_path: str) -> bool:
        """Whether ``public_path`` lies inside the namespace this store may create and delete."""

    @abstractmethod
    async def store(self, payload: ImagePayload) -> str:
        """Persist ``payload`` under a generated unique name and return its public reference."""

    @abstractmethod
    async def delete(self, public_path: str) -> bool:
        """Delete a managed asset; False when outside the namespace or already absent."""

    @abstractmethod
    async def exists(self, public_path: str) -> bool:
        """True for any unmanaged reference, otherwise whether the asset is present."""


class LocalImageStore(ImageStore):
    def __init__(self, public_dir: Path, uploads_folder: str = "uploads"):
        self.public_dir = Path(public_dir)
        self.uploads_folder = uploads_folder.strip("/")
        self.uploads_dir = self.public_dir / self.uploads_folder

    @property
    def prefix(self) -> str:
        return f"/{self.uploads_folder}/"

    def is_managed(self, public_path: str) -> bool:
        return bool(public_path) and public_path.startswith(self.prefix)

    def resolve(self, public_path: str) -> Path | None:
        """Filesystem path of a managed reference, or None when it escapes the upload directory."""
        if not self.is_managed(public_path):
            return None
        candidate = (self.public_dir / public_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.uploads_dir.resolve()):
            logger.warning(f"Refusing path outside the upload directory: {public_path}")
            return None
        return candidate

    def _write(self, filename: str, data: bytes) -> None:
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        (self.uploads_dir / filename).write_bytes(data)

    async def store(self, payload: ImagePayload) -> str:
        filename = generate_filename(payload)
        await asyncio.to_thread(self._write, filename, payload.data)
        public_path = f"{self.prefix}{filename}"
        logger.info(f"Stored image {public_path} ({len(payload.data)} bytes)")
        return public_path

    async def delete(self, public_path: str) -> bool:
        file_path = self.resolve(public_path)
        if file_path is None:
            return False
        if not file_path.exists():
            logger.info(f"File {file_path} does not exist, skipping deletion")
            return False
        await asyncio.to_thread(file_path.unlink)
        logger.info(f"Deleted image file: {file_path}")
        return True

    async def exists(self, public_path: str) -> bool:
        if not self.is_managed(public_path):
            return True
        file_path = self.resolve(public_path)
        return file_path is not None and await asyncio.to_thread(file_path.is_file)


class S3ImageStore(ImageStore):
    """Images kept in an S3-compatible bucket; ``client`` is a boto3 S3 client."""

    def __init__(self, client, bucket: str, base_url: str, key_prefix: str = "uploads"):
        self.client = client
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.key_prefix = key_prefix.strip("/")

    @property
    def prefix(self) -> str:
        return f"{self.base_url}/{self.key_prefix}/"

    def is_managed(self, public_path: str) -> bool:
        return bool(public_path) and public_path.startswith(self.prefix)

    def _key(self, public_path: str) -> str | None:
        if not self.is_managed(public_path):
            return None
        relative = public_path[len(self.base_url) + 1 :]
        if ".." in relative.split("/"):
            return None
        return relative

    def _head(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in {"404", "NoSuchKey", "NotFound"}:
                return False
            raise
        return True

    async def store(self, payload: ImagePayload) -> str:
        key = f"{self.key_prefix}/{generate_filename(payload)}"
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=payload.data,
            ContentType=payload.mime_type,
        )
        public_url = f"{self.base_url}/{key}"
        logger.info(f"Stored image s3://{self.bucket}/{key} ({len(payload.data)} bytes)")
        return public_url

    async def delete(self, public_path: str) -> bool:
        key = self._key(public_path)
        if key is None:
            return False
        if not await asyncio.to_thread(self._head, key):
            logger.info(f"Object s3://{self.bucket}/{key} does not exist, skipping deletion")
            return False
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        logger.info(f"Deleted object s3://{self.bucket}/{key}")
        return True

    async def exists(self, public_path: str) -> bool:
        if not self.is_managed(public_path):
            return True
        key = self._key(public_path)
        return key is not None and await asyncio.to_thread(self._head, key)
