"""
Object storage for original resume files.

Wraps an S3 (or S3-compatible) bucket: upload without overwrite, retrieval
URL resolution and best-effort removal.
"""

import logging
import os
import time
from typing import Any, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from skillsync.config import StorageConfig
from skillsync.errors import StorageError

logger = logging.getLogger(__name__)


class ResumeStorageService:
    """Service class for resume file storage operations."""

    def __init__(
        self, config: Optional[StorageConfig] = None, s3_client: Any = None
    ):
        self.config = config or StorageConfig.from_env()
        self.bucket = self.config.bucket
        self.s3_client = s3_client or boto3.client(
            "s3",
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            region_name=self.config.region,
            endpoint_url=self.config.endpoint_url,
            config=Config(
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
                retries={"total_max_attempts": 1},
            ),
        )

    def build_object_key(self, user_id: str, file_name: str) -> str:
        """``{namespace}/{user_id}/{epoch-ms}-{file_name}``."""
        base_name = os.path.basename(file_name) or "resume"
        return f"{self.config.namespace}/{user_id}/{int(time.time() * 1000)}-{base_name}"

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """
        Upload ``data`` under ``key``; refuses to replace an existing object.

        Args:
            key: Object key
            data: File content
            content_type: MIME type stored with the object

        Returns:
            str: The key that was written

        Raises:
            StorageError: If the bucket rejects or cannot be reached
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
                IfNoneMatch="*",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload s3://{self.bucket}/{key}: {str(e)}")
            raise StorageError() from e

        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket}/{key}")
        return key

    def get_public_url(self, key: str) -> str:
        quoted = quote(key, safe="/")
        if self.config.public_base_url:
            return f"{self.config.public_base_url.rstrip('/')}/{quoted}"
        if self.config.endpoint_url:
            return f"{self.config.endpoint_url.rstrip('/')}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.{self.config.region}.amazonaws.com/{quoted}"

    def delete_object(self, key: str) -> bool:
        """
        Delete a resume file from storage.

        Args:
            key: Object key

        Returns:
            bool: True if successful, False otherwise
        """
        if not key:
            return False
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"Deleted file from S3: s3://{self.bucket}/{key}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Failed to delete file from S3: {str(e)}")
            return False
