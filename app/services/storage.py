import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional, Tuple
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from app.config.settings import settings
from app.exceptions import StorageError
from app.utils.validation import sanitize_filename

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = ("NoSuchKey", "404", "NotFound")


@dataclass
class PresignedUpload:
    key: str
    presigned_url: str
    public_url: str


def create_s3_client():
    return boto3.client('s3',
                        endpoint_url=settings.S3_ENDPOINT_URL,
                        region_name=settings.S3_REGION,
                        aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
                        aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
                        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}))


def build_object_key(filename: str) -> str:
    return f"{uuid.uuid4()}-{sanitize_filename(filename)}"


class StorageGateway:
    """Presigned uploads, deletes and listings against one S3-compatible bucket."""

    def __init__(self, client=None, bucket: Optional[str] = None,
                 public_base_url: Optional[str] = None, expiration: Optional[int] = None):
        self.client = client or create_s3_client()
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self.public_base_url = (public_base_url or settings.S3_PUBLIC_BASE_URL).rstrip("/")
        self.expiration = expiration or settings.PRESIGNED_URL_EXPIRATION

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{quote(key)}"

    def issue_upload_url(self, filename: str, content_type: str, size: int) -> PresignedUpload:
        """
        Generate a presigned PUT URL for a fresh, unique object key.

        The signature binds the content type and length, so the client can
        only push an object of the size and type it announced.
        """
        key = build_object_key(filename)
        try:
            presigned_url = self.client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket,
                    'Key': key,
                    'ContentType': content_type,
                    'ContentLength': size,
                },
                ExpiresIn=self.expiration
            )
        except NoCredentialsError:
            logger.error("Credentials not available")
            raise StorageError("Failed to generate upload URL")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error generating upload URL for {key}: {e}")
            raise StorageError("Failed to generate upload URL")

        logger.info(f"Generated upload URL for {key}")
        return PresignedUpload(key=key, presigned_url=presigned_url, public_url=self.public_url(key))

    def delete_object(self, key: str) -> str:
        # A missing object counts as deleted; existence is the caller's concern
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except NoCredentialsError:
            logger.error("Credentials not available")
            raise StorageError("File deletion failed")
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', '')
            if code in MISSING_OBJECT_CODES:
                logger.info(f"Object {key} was already absent from storage")
                return key
            logger.error(f"Error deleting file {key}: {e}")
            raise StorageError("File deletion failed", details={"key": key})
        except BotoCoreError as e:
            logger.error(f"Error deleting file {key}: {e}")
            raise StorageError("File deletion failed", details={"key": key})

        logger.info(f"Deleted object {key}")
        return key

    def iter_objects(self) -> Iterator[Tuple[str, datetime]]:
        try:
            paginator = self.client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket):
                for obj in page.get('Contents', []):
                    yield obj['Key'], obj['LastModified']
        except NoCredentialsError:
            logger.error("Credentials not available")
            raise StorageError("Listing storage objects failed")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error listing storage objects: {e}")
            raise StorageError("Listing storage objects failed")


_storage_gateway: Optional[StorageGateway] = None


def get_storage() -> StorageGateway:
    global _storage_gateway
    if _storage_gateway is None:
        _storage_gateway = StorageGateway()
    return _storage_gateway
