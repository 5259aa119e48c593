"""
Standardized exception hierarchy for consistent error handling.
"""
from typing import Optional


class ServiceError(Exception):
    """Base exception for service-related errors."""
    def __init__(self, message: str, service: str = None, error_code: str = None):
        super().__init__(message)
        self.service = service
        self.error_code = error_code
        self.message = message


class ConfigurationError(ServiceError):
    """Required setting missing or invalid at startup."""
    def __init__(self, message: str, config_key: str = None):
        super().__init__(message, error_code="CONFIG_ERROR")
        self.config_key = config_key


class ConnectivityError(ServiceError):
    """Storage backend is unreachable (connection refused, timeout, DNS, etc.)."""
    def __init__(self, message: str, service: str = "storage", operation: str = None):
        super().__init__(message, service=service, error_code="SERVICE_UNAVAILABLE")
        self.operation = operation


class StorageError(ServiceError):
    """Storage (MinIO, S3, etc.) related error."""
    error_code = "STORAGE_ERROR"

    def __init__(
        self,
        message: str,
        operation: str = None,
        bucket: Optional[str] = None,
        object_name: Optional[str] = None,
    ):
        super().__init__(message, service="storage", error_code=type(self).error_code)
        self.operation = operation
        self.bucket = bucket
        self.object_name = object_name


class NotFoundError(StorageError):
    """Requested object key does not exist."""
    error_code = "NOT_FOUND"


class StorageWriteError(StorageError):
    """Backend rejected or failed a put."""
    error_code = "STORAGE_WRITE_ERROR"


class StorageReadError(StorageError):
    """Backend rejected or failed a get or list."""
    error_code = "STORAGE_READ_ERROR"
