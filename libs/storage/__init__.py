"""
Storage service abstractions.
"""
from .base import ObjectSummary, StorageClient
from .bootstrap import bootstrap_storage, build_public_read_policy, ensure_bucket
from .minio_client import MinioStorageClient
from .streams import ObjectStream, RequestBodyReader

__all__ = [
    'StorageClient', 'ObjectSummary', 'MinioStorageClient',
    'ObjectStream', 'RequestBodyReader',
    'bootstrap_storage', 'build_public_read_policy', 'ensure_bucket',
]
