"""
Test configuration and fixtures.
Uses an in-memory storage backend so no MinIO server is needed.
"""
import io
import threading
from typing import AsyncGenerator, Dict, Iterator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from libs.common.config import AppConfig, MinioConfig, ServerConfig
from libs.metrics import reset_metrics
from libs.storage import ObjectStream, ObjectSummary, StorageClient
from libs.common.exceptions import NotFoundError

TEST_BUCKET = "test-bucket"
READ_SIZE = 8192


class FakeStorageClient(StorageClient):
    """Dict-backed StorageClient that records every call."""

    def __init__(self, buckets: Optional[List[str]] = None):
        self.buckets = {name: {} for name in (buckets or [])}
        self.content_types: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.policies: Dict[str, list] = {}
        self.max_read = 0
        self.fail_with: Dict[str, Exception] = {}
        self.fail_list_after: Optional[int] = None
        self._lock = threading.Lock()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_with:
            raise self.fail_with[operation]

    def list_buckets(self) -> List[str]:
        self.calls.append(("list_buckets",))
        self._maybe_fail("list_buckets")
        return list(self.buckets)

    def bucket_exists(self, bucket: str) -> bool:
        self.calls.append(("bucket_exists", bucket))
        self._maybe_fail("bucket_exists")
        return bucket in self.buckets

    def create_bucket(self, bucket: str) -> None:
        self.calls.append(("create_bucket", bucket))
        self._maybe_fail("create_bucket")
        self.buckets.setdefault(bucket, {})

    def set_bucket_policy(self, bucket: str, policy: dict) -> None:
        self.calls.append(("set_bucket_policy", bucket))
        self._maybe_fail("set_bucket_policy")
        self.policies.setdefault(bucket, []).append(policy)

    def put_object(self, bucket, object_name, data, length=-1, content_type="application/octet-stream") -> None:
        self.calls.append(("put_object", bucket, object_name))
        self._maybe_fail("put_object")
        parts = []
        while True:
            chunk = data.read(READ_SIZE)
            if not chunk:
                break
            with self._lock:
                self.max_read = max(self.max_read, len(chunk))
            parts.append(chunk)
        with self._lock:
            self.buckets[bucket][object_name] = b"".join(parts)
            self.content_types[object_name] = content_type

    def get_object(self, bucket: str, object_name: str) -> ObjectStream:
        self.calls.append(("get_object", bucket, object_name))
        self._maybe_fail("get_object")
        try:
            data = self.buckets[bucket][object_name]
        except KeyError:
            raise NotFoundError(
                f"Object not found: {bucket}/{object_name}",
                operation="get_object", bucket=bucket, object_name=object_name,
            )
        return ObjectStream(
            io.BytesIO(data),
            bucket=bucket,
            object_name=object_name,
            content_type=self.content_types.get(object_name),
            content_length=len(data),
        )

    def list_objects(self, bucket: str) -> Iterator[ObjectSummary]:
        self.calls.append(("list_objects", bucket))
        for index, name in enumerate(sorted(self.buckets.get(bucket, {}))):
            if self.fail_list_after is not None and index >= self.fail_list_after:
                raise self.fail_with["list_objects"]
            yield ObjectSummary(name=name, size=len(self.buckets[bucket][name]))

    def seed(self, bucket: str, name: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.buckets.setdefault(bucket, {})[name] = data
        self.content_types[name] = content_type


@pytest.fixture
def minio_config() -> MinioConfig:
    return MinioConfig(
        host="minio.local",
        port=9000,
        access_key="access",
        secret_key="secret",
        bucket=TEST_BUCKET,
    )


@pytest.fixture
def app_config(minio_config: MinioConfig) -> AppConfig:
    return AppConfig(minio=minio_config, server=ServerConfig(port=3000))


@pytest.fixture
def storage() -> FakeStorageClient:
    return FakeStorageClient(buckets=[TEST_BUCKET])


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def test_app(app_config: AppConfig, storage: FakeStorageClient):
    from app import create_app
    return create_app(app_config, storage)


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app; lifespan is not run, storage is injected."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
