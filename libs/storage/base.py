"""
Abstract base class for storage services (MinIO, S3, etc.).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, List, Optional

from .streams import ObjectStream


@dataclass
class ObjectSummary:
    """One entry of a bucket listing."""
    name: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "size": self.size,
            "last_modified": self.last_modified.isoformat() if self.last_modified else None,
            "etag": self.etag,
        }


class StorageClient(ABC):
    """Abstract storage client interface."""

    @abstractmethod
    def list_buckets(self) -> List[str]:
        """List bucket names; used as a connectivity probe."""
        pass

    @abstractmethod
    def bucket_exists(self, bucket: str) -> bool:
        """Check if bucket exists."""
        pass

    @abstractmethod
    def create_bucket(self, bucket: str) -> None:
        """Create bucket. An already-existing bucket counts as success."""
        pass

    @abstractmethod
    def set_bucket_policy(self, bucket: str, policy: dict) -> None:
        """Replace the bucket's access policy."""
        pass

    @abstractmethod
    def put_object(
        self,
        bucket: str,
        object_name: str,
        data: BinaryIO,
        length: int = -1,
        content_type: str = "application/octet-stream"
    ) -> None:
        """Upload from a readable stream; ``length=-1`` when the size is unknown."""
        pass

    @abstractmethod
    def get_object(self, bucket: str, object_name: str) -> ObjectStream:
        """Open an object for streaming. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    def list_objects(self, bucket: str) -> Iterator[ObjectSummary]:
        """Lazy, one-shot listing of every object in the bucket."""
        pass
