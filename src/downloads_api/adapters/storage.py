"""
Read-only object storage used to look up generated download pages.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import boto3
from botocore.exceptions import ClientError
from fastapi.concurrency import run_in_threadpool

from downloads_api.config.settings import Settings, get_settings
from downloads_api.schemas import ObjectEntry, ObjectListing, StoredObject

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def create_s3_client(settings: Settings) -> "S3Client":
    """Build an S3 client from settings (endpoint may point at R2, MinIO or moto)."""
    return boto3.client(
        "s3",
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region
    )


class ObjectStorage:
    """Base class for object storage (to be extended by specific implementations)"""
    async def list(self, prefix: str, limit: int) -> ObjectListing:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[StoredObject]:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    """Serves objects from a directory on the local file system"""
    def __init__(self, storage_dir: str):
        self.root = Path(storage_dir)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalObjectStorage initialized at: %s", self.root)

    def _key_for(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    async def list(self, prefix: str, limit: int) -> ObjectListing:
        """List files whose relative path starts with prefix, in key order."""
        # Only walk the directory the prefix points into
        directory = prefix.rsplit("/", 1)[0] if "/" in prefix else ""
        base = self.root / directory
        if not base.is_dir():
            return ObjectListing()

        entries = []
        for path in sorted(base.rglob("*")):
            if not path.is_file():
                continue
            key = self._key_for(path)
            if not key.startswith(prefix):
                continue
            uploaded = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            entries.append(ObjectEntry(key=key, uploaded=uploaded))
            if len(entries) >= limit:
                break

        logger.debug("Listed %d local objects under %s", len(entries), prefix)
        return ObjectListing(objects=entries)

    async def get(self, key: str) -> Optional[StoredObject]:
        """Read a file by key, or None when it is missing."""
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()) or not path.is_file():
            return None
        return StoredObject(key=key, body=path.read_bytes())


class S3ObjectStorage(ObjectStorage):
    """Serves objects from an S3-compatible bucket"""
    def __init__(self, bucket_name: str, s3_client: Optional["S3Client"] = None):
        self.s3 = s3_client or create_s3_client(get_settings())
        self.bucket_name = bucket_name

        logger.info(f"S3ObjectStorage initialized")
        logger.info(f"  Bucket: {self.bucket_name}")

    async def list(self, prefix: str, limit: int) -> ObjectListing:
        """List up to `limit` objects under prefix with their LastModified times."""
        response = await run_in_threadpool(
            self.s3.list_objects_v2,
            Bucket=self.bucket_name,
            Prefix=prefix,
            MaxKeys=limit,
        )
        entries = [
            ObjectEntry(key=obj["Key"], uploaded=obj.get("LastModified"))
            for obj in response.get("Contents", [])
        ]
        logger.debug(f"Listed {len(entries)} objects under s3://{self.bucket_name}/{prefix}")
        return ObjectListing(objects=entries)

    async def get(self, key: str) -> Optional[StoredObject]:
        """Fetch an object, or None when the key does not exist."""
        try:
            response = await run_in_threadpool(self.s3.get_object, Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        body = await run_in_threadpool(response["Body"].read)
        return StoredObject(
            key=key,
            body=body,
            content_type=response.get("ContentType"),
        )


class StorageFactory:
    """Factory to initialize the correct storage backend based on deployment mode"""

    @staticmethod
    def get_storage(settings: Optional[Settings] = None) -> ObjectStorage:
        settings = settings or get_settings()

        deployment_mode = settings.deployment_mode
        logger.info(f"Creating object storage for mode: {deployment_mode}")

        if deployment_mode == "local-dev":
            return LocalObjectStorage(settings.storage_dir)
        if deployment_mode in ("aws-mock", "aws-prod"):
            return S3ObjectStorage(settings.s3_bucket_name, s3_client=create_s3_client(settings))

        raise ValueError(
            f"Invalid deployment_mode: {deployment_mode}. "
            f"Choose from ['local-dev', 'aws-mock', 'aws-prod']"
        )
