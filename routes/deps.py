"""
Request-scoped accessors for state established at bootstrap.
"""
from fastapi import Request

from libs.common.config import AppConfig
from libs.storage import StorageClient


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config
