"""
MinIO storage client implementation.
"""
import json
import logging
from typing import BinaryIO, Iterator, List, Optional, Type

import urllib3
from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

from ..common.config import MinioConfig
from ..common.exceptions import (
    ConnectivityError,
    NotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from .base import ObjectSummary, StorageClient
from .streams import ObjectStream

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("NoSuchKey", "NoSuchObject")
BUCKET_EXISTS_CODES = ("BucketAlreadyOwnedByYou", "BucketAlreadyExists")


def _translate(
    exc: Exception,
    operation: str,
    error_cls: Type[StorageError],
    bucket: str = None,
    object_name: str = None,
) -> Exception:
    """Map an SDK or transport error onto the service error taxonomy."""
    target = f"{bucket}/{object_name}" if object_name else bucket
    if isinstance(exc, HTTPError):
        return ConnectivityError(f"Storage unreachable during {operation} {target}: {exc}", operation=operation)
    if isinstance(exc, S3Error) and exc.code in NOT_FOUND_CODES:
        return NotFoundError(
            f"Object not found: {target}", operation=operation, bucket=bucket, object_name=object_name
        )
    return error_cls(
        f"Storage error during {operation} {target}: {exc}",
        operation=operation,
        bucket=bucket,
        object_name=object_name,
    )


def build_http_client(timeout: Optional[float]) -> Optional[urllib3.PoolManager]:
    """PoolManager with a hard connect/read timeout, or None for the SDK default."""
    if timeout is None:
        return None
    return urllib3.PoolManager(
        timeout=urllib3.Timeout(connect=timeout, read=timeout),
        retries=False,
    )


class MinioStorageClient(StorageClient):
    """MinIO implementation of StorageClient."""

    def __init__(self, config: MinioConfig, client: Optional[Minio] = None):
        self.config = config
        self.client = client or Minio(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
            http_client=build_http_client(config.timeout),
        )

    def list_buckets(self) -> List[str]:
        """List bucket names."""
        try:
            return [b.name for b in self.client.list_buckets()]
        except (MinioException, HTTPError) as e:
            raise ConnectivityError(f"Cannot reach storage at {self.config.endpoint}: {e}", operation="list_buckets")

    def bucket_exists(self, bucket: str) -> bool:
        """Check if bucket exists."""
        try:
            return self.client.bucket_exists(bucket_name=bucket)
        except (MinioException, HTTPError) as e:
            raise _translate(e, "bucket_exists", StorageError, bucket)

    def create_bucket(self, bucket: str) -> None:
        """Create bucket."""
        try:
            self.client.make_bucket(bucket_name=bucket)
        except S3Error as e:
            if e.code in BUCKET_EXISTS_CODES:
                logger.info(f"[storage] Bucket {bucket} was created concurrently ({e.code})")
                return
            raise _translate(e, "create_bucket", StorageError, bucket)
        except (MinioException, HTTPError) as e:
            raise _translate(e, "create_bucket", StorageError, bucket)

    def set_bucket_policy(self, bucket: str, policy: dict) -> None:
        """Assign a JSON policy document to the bucket."""
        try:
            self.client.set_bucket_policy(bucket_name=bucket, policy=json.dumps(policy))
        except (MinioException, HTTPError) as e:
            raise _translate(e, "set_bucket_policy", StorageError, bucket)

    def put_object(
        self,
        bucket: str,
        object_name: str,
        data: BinaryIO,
        length: int = -1,
        content_type: str = "application/octet-stream"
    ) -> None:
        """
        Stream ``data`` into the bucket.

        With an unknown length the SDK uploads ``part_size`` multipart chunks;
        a single upload worker keeps at most one part in memory.
        """
        try:
            self.client.put_object(
                bucket_name=bucket,
                object_name=object_name,
                data=data,
                length=length,
                content_type=content_type,
                part_size=self.config.part_size if length < 0 else 0,
                num_parallel_uploads=1,
            )
        except (MinioException, HTTPError) as e:
            raise _translate(e, "put_object", StorageWriteError, bucket, object_name)

    def get_object(self, bucket: str, object_name: str) -> ObjectStream:
        """Open the object; the caller owns the returned stream."""
        try:
            response = self.client.get_object(bucket_name=bucket, object_name=object_name)
        except (MinioException, HTTPError) as e:
            raise _translate(e, "get_object", StorageReadError, bucket, object_name)

        length = response.headers.get("Content-Length")
        return ObjectStream(
            response,
            bucket=bucket,
            object_name=object_name,
            content_type=response.headers.get("Content-Type"),
            content_length=int(length) if length and length.isdigit() else None,
        )

    def list_objects(self, bucket: str) -> Iterator[ObjectSummary]:
        """Yield every object in the bucket in backend order."""
        try:
            for obj in self.client.list_objects(bucket_name=bucket, recursive=True):
                yield ObjectSummary(
                    name=obj.object_name,
                    size=obj.size,
                    last_modified=obj.last_modified,
                    etag=obj.etag,
                )
        except (MinioException, HTTPError) as e:
            raise _translate(e, "list_objects", StorageReadError, bucket)
