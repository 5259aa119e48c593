"""
bootstrap.py — Prepare the storage backend before the HTTP listener starts

Steps:
- Validate MinIO configuration
- Build the client and probe connectivity
- Create the bucket with an anonymous-read policy if it does not exist yet

An existing bucket is left untouched so manually configured policies survive
restarts. Any failure propagates; there is no degraded start.
"""

import logging
from typing import Callable

from ..common.config import MinioConfig
from .base import StorageClient
from .minio_client import MinioStorageClient

logger = logging.getLogger(__name__)

POLICY_VERSION = "2012-10-17"


def build_public_read_policy(bucket: str) -> dict:
    """Policy granting anonymous GetObject on every object in ``bucket``, nothing else."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Action": ["s3:GetObject"],
                "Effect": "Allow",
                "Principal": {"AWS": ["*"]},
                "Resource": [f"arn:aws:s3:::{bucket}/*"],
            },
        ],
    }


def ensure_bucket(storage: StorageClient, bucket: str) -> bool:
    """
    Create ``bucket`` and assign the public-read policy when it is missing.

    Returns True if the bucket was created.
    """
    logger.info(f"[bootstrap] Checking whether bucket \"{bucket}\" exists...")
    if storage.bucket_exists(bucket):
        logger.info(f"[bootstrap] Bucket \"{bucket}\" already exists")
        return False

    logger.info(f"[bootstrap] Bucket \"{bucket}\" does not exist, creating...")
    storage.create_bucket(bucket)
    logger.info("[bootstrap] Bucket created")

    logger.info("[bootstrap] Setting bucket policy to allow anonymous reads...")
    storage.set_bucket_policy(bucket, build_public_read_policy(bucket))
    logger.info("[bootstrap] Policy set")
    return True


def bootstrap_storage(
    config: MinioConfig,
    client_factory: Callable[[MinioConfig], StorageClient] = MinioStorageClient,
) -> StorageClient:
    """Validate config, connect, and guarantee the target bucket. Returns the ready client."""
    config.validate()

    logger.info("[bootstrap] Connecting to MinIO storage...")
    logger.info(
        f"[bootstrap] Connection details: endpoint={config.host}, port={config.port}, "
        f"use_ssl={config.use_ssl}"
    )
    storage = client_factory(config)

    logger.info("[bootstrap] Testing MinIO connection...")
    storage.list_buckets()
    logger.info("[bootstrap] Connected to MinIO")

    ensure_bucket(storage, config.bucket)
    return storage
