"""
Common utilities and abstractions shared across the system.
"""
from .config import AppConfig, MinioConfig, ServerConfig
from .exceptions import (
    ServiceError,
    ConfigurationError,
    ConnectivityError,
    StorageError,
    NotFoundError,
    StorageWriteError,
    StorageReadError,
)
from .logging import setup_logging

__all__ = [
    # Config
    'AppConfig', 'MinioConfig', 'ServerConfig',
    # Exceptions
    'ServiceError', 'ConfigurationError', 'ConnectivityError', 'StorageError',
    'NotFoundError', 'StorageWriteError', 'StorageReadError',
    # Logging
    'setup_logging',
]
