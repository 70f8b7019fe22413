"""Artifact storage: S3 when configured, otherwise a local directory."""

import asyncio
import logging
import re
import shutil
import uuid
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slicr.config import Settings
from slicr.errors import PublishError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")

CONTENT_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".srt": "application/x-subrip",
}


def sanitize_filename(name: str, default: str = "audio") -> str:
    """Replace everything outside ``[a-zA-Z0-9_.-]`` with underscores."""
    cleaned = _UNSAFE_KEY_CHARS.sub("_", Path(name or "").name)
    return cleaned or default


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


class S3ObjectStore:
    """Publishes artifacts to an S3 bucket and issues pre-signed URLs."""

    def __init__(self, bucket: str, region: str, client: Any | None = None) -> None:
        self.bucket = bucket
        self.region = region
        self._client = client or boto3.session.Session().client("s3", region_name=region)

    def public_url(self, key: str) -> str:
        """Virtual-hosted-style object URL."""
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, path: Path, key: str, content_type: str) -> str:
        """Upload a local file and return its public URL.

        Raises:
            PublishError: If the upload fails
        """
        try:
            await asyncio.to_thread(
                self._client.upload_file,
                str(path),
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as e:
            raise PublishError(f"Failed to upload {key} to S3: {e}") from e

        logger.info("Uploaded %s to s3://%s/%s", Path(path).name, self.bucket, key)
        return self.public_url(key)

    def presign_upload(self, key: str, content_type: str, expires_in: int) -> str:
        """Time-limited PUT URL for a direct client upload."""
        try:
            return self._client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise PublishError(f"Failed to generate upload URL: {e}") from e

    def presign_download(self, key: str, expires_in: int) -> str:
        """Time-limited GET URL, usable as ``audioUrl`` for processing."""
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise PublishError(f"Failed to generate download URL: {e}") from e


class LocalObjectStore:
    """Copies artifacts into a directory; URLs are ``base_url/<key>``."""

    def __init__(self, root: Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def resolve(self, key: str) -> Path | None:
        """Map a key back to a file inside the root, or None if it escapes it."""
        candidate = (self.root / key).resolve()
        root = self.root.resolve()
        if candidate == root or root not in candidate.parents:
            return None
        return candidate

    async def upload(self, path: Path, key: str, content_type: str) -> str:
        dest = self.resolve(key)
        if dest is None:
            raise PublishError(f"Invalid storage key: {key}")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copyfile, path, dest)
        except OSError as e:
            raise PublishError(f"Failed to store {key}: {e}") from e

        logger.info("Stored %s at %s", Path(path).name, dest)
        return f"{self.base_url}/{key}"


def build_object_store(settings: Settings) -> S3ObjectStore | LocalObjectStore:
    """S3 if bucket and region are configured, else the local output directory."""
    if settings.s3_enabled:
        return S3ObjectStore(bucket=settings.s3_bucket_name, region=settings.aws_region)

    logger.warning("S3 not configured; publishing to local directory %s", settings.output_dir)
    return LocalObjectStore(
        root=settings.output_dir,
        base_url=f"{settings.public_base_url.rstrip('/')}/files",
    )


def unique_upload_key(filename: str) -> str:
    """Object key for a direct client upload."""
    return f"uploads/{uuid.uuid4()}-{sanitize_filename(filename)}"
