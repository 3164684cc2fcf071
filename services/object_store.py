"""
Remote object storage for uploaded documents
"""
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from config import settings
from utils.exceptions import StorageError
from utils.error_handlers import log_performance_metric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Location of an object written to the store"""
    key: str
    address: str
    size_bytes: int


class ObjectStoreInterface(ABC):
    """Abstract interface for remote object storage"""

    def store(self, data: bytes, name: str) -> str:
        """Persist a payload and return its publicly reachable address"""
        return self.put(data, name).address

    @abstractmethod
    def put(self, data: bytes, name: str) -> StoredObject:
        """Persist a payload under a unique key"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an object previously written by this store"""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the store is configured well enough to accept writes"""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the store"""
        pass


class S3ObjectStore(ObjectStoreInterface):
    """Amazon S3 (or S3-compatible) implementation of object storage"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        key_prefix: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        public_read: Optional[bool] = None,
        client: Optional[Any] = None
    ):
        """
        Initialize the S3 object store

        Args:
            bucket: Bucket name (if None, will use settings.s3_bucket)
            region: AWS region (if None, will use settings.s3_region)
            key_prefix: Folder objects are written under
            endpoint_url: Endpoint of an S3-compatible service
            public_base_url: Base URL to build addresses from instead of the bucket URL
            public_read: Whether objects are written with the public-read ACL
            client: Pre-built boto3 S3 client
        """
        self.bucket = bucket or settings.s3_bucket
        self.region = region or settings.s3_region
        self.key_prefix = (key_prefix if key_prefix is not None else settings.s3_key_prefix).strip("/")
        self.endpoint_url = endpoint_url or settings.s3_endpoint_url
        self.public_base_url = public_base_url or settings.s3_public_base_url
        self.public_read = settings.s3_public_read if public_read is None else public_read

        self._last_millis = 0
        self._key_lock = threading.Lock()
        self._objects_stored = 0

        self.client = client or self._create_client()

    def _create_client(self):
        """Create a boto3 client with explicit timeouts and no retries"""
        boto_config = BotoConfig(
            connect_timeout=settings.storage_connect_timeout_seconds,
            read_timeout=settings.storage_read_timeout_seconds,
            retries={"max_attempts": 1, "mode": "standard"}
        )

        logger.info(f"Initializing S3 client for bucket '{self.bucket}' in region {self.region}")

        return boto3.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            config=boto_config
        )

    def _next_key(self, name: str) -> str:
        """Build a time-prefixed key that never repeats within this store"""
        safe_name = os.path.basename(name.replace("\\", "/")).strip() or "document.pdf"

        with self._key_lock:
            millis = max(int(time.time() * 1000), self._last_millis + 1)
            self._last_millis = millis

        object_name = f"{millis}-{safe_name}"
        return f"{self.key_prefix}/{object_name}" if self.key_prefix else object_name

    def address_for(self, key: str) -> str:
        """Public address of an object key"""
        quoted_key = quote(key, safe="/")

        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quoted_key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{quoted_key}"
        if self.region == "us-east-1":
            return f"https://{self.bucket}.s3.amazonaws.com/{quoted_key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quoted_key}"

    def put(self, data: bytes, name: str) -> StoredObject:
        """
        Write a document to the bucket

        Args:
            data: Raw document bytes
            name: Display name used as the key suffix

        Returns:
            StoredObject with the key and public address

        Raises:
            StorageError: If the bucket is not configured or the write fails
        """
        if not self.bucket:
            raise StorageError("Object store bucket is not configured")

        key = self._next_key(name)
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentType": "application/pdf",
        }
        if self.public_read:
            params["ACL"] = "public-read"

        start_time = time.time()
        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to store object {key} in bucket {self.bucket}: {e}")
            raise StorageError(
                message=f"Failed to store document '{name}'",
                bucket=self.bucket,
                key=key,
                original_exception=e
            )

        duration_ms = int((time.time() - start_time) * 1000)
        log_performance_metric("object_store_put", duration_ms, {"key": key, "size_bytes": len(data)})

        self._objects_stored += 1
        return StoredObject(key=key, address=self.address_for(key), size_bytes=len(data))

    def delete(self, key: str) -> None:
        """
        Delete an object from the bucket

        Raises:
            StorageError: If the delete fails
        """
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"Deleted object {key} from bucket {self.bucket}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete object {key} from bucket {self.bucket}: {e}")
            raise StorageError(
                message=f"Failed to delete object '{key}'",
                bucket=self.bucket,
                key=key,
                original_exception=e
            )

    def is_available(self) -> bool:
        return bool(self.bucket)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": "s3",
            "bucket": self.bucket,
            "region": self.region,
            "key_prefix": self.key_prefix,
            "public_read": self.public_read,
            "objects_stored": self._objects_stored
        }


# Factory function to create object store instances
def create_object_store(store_type: str = "s3", **kwargs) -> ObjectStoreInterface:
    """
    Factory function to create object store instances

    Args:
        store_type: Type of object store ("s3")
        **kwargs: Additional arguments for the object store

    Returns:
        ObjectStore instance
    """
    if store_type.lower() == "s3":
        return S3ObjectStore(**kwargs)
    else:
        raise ValueError(f"Unsupported object store type: {store_type}")
