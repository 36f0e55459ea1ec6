"""S3 presigned upload URLs for receipt images."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from domeal.config import Settings, get_settings
from domeal.errors import SigningError, StorageConfigError

logger = logging.getLogger(__name__)

RECEIPT_CONTENT_TYPE = "image/png"
UPLOAD_URL_EXPIRATION = timedelta(minutes=15)


@dataclass
class UploadCredential:
    """A write-only URL for one object key. Expiry is enforced by S3."""

    object_key: str
    upload_url: str
    expires_at: datetime


def generate_receipt_key(group_id: int) -> str:
    """Build a new object key scoped under the group: ``{group_id}/{uuid}.png``."""
    return f"{group_id}/{uuid.uuid4()}.png"


class StorageService:
    """Signs direct-upload URLs and resolves public object URLs."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.expires_in = UPLOAD_URL_EXPIRATION

    def _require_bucket(self) -> tuple[str, str]:
        bucket = self.settings.s3_bucket_name
        region = self.settings.aws_region
        if not bucket:
            logger.error("S3_BUCKET_NAME environment variable is not set")
            raise StorageConfigError("S3 configuration error")
        if not region:
            logger.error("AWS_REGION environment variable is not set")
            raise StorageConfigError("AWS configuration error")
        return bucket, region

    def _client(self, region: str):
        access_key = self.settings.aws_access_key_id
        secret_key = self.settings.aws_secret_access_key
        if not access_key or not secret_key:
            logger.error("AWS credentials are missing. Please check environment variables.")
            raise StorageConfigError("AWS configuration error")
        return boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version="s3v4"),
        )

    def presign_upload(self, object_key: str) -> UploadCredential:
        """Sign a PUT URL for ``object_key`` constrained to PNG uploads."""
        bucket, region = self._require_bucket()
        client = self._client(region)
        issued_at = datetime.now(UTC)

        try:
            url = client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": bucket,
                    "Key": object_key,
                    "ContentType": RECEIPT_CONTENT_TYPE,
                },
                ExpiresIn=int(self.expires_in.total_seconds()),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            raise SigningError("Failed to generate presigned URL") from e

        return UploadCredential(
            object_key=object_key,
            upload_url=url,
            expires_at=issued_at + self.expires_in,
        )

    def public_url(self, object_key: str) -> str:
        """Public HTTPS URL the OCR provider fetches the image from."""
        bucket, region = self._require_bucket()
        return f"https://{bucket}.s3.{region}.amazonaws.com/{object_key}"


def get_storage_service() -> StorageService:
    """Get a storage service instance."""
    return StorageService()
