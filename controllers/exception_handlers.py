"""FastAPI exception handlers for service errors raised inside request handlers."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from libs.common.exceptions import (
    ConnectivityError,
    NotFoundError,
    ServiceError,
    StorageError,
)
from libs.metrics import increment_metric

logger = logging.getLogger(__name__)


async def service_exception_handler(request: Request, exc: ServiceError) -> PlainTextResponse:
    """Map the error taxonomy onto HTTP status codes; one failing request never affects another."""
    if isinstance(exc, NotFoundError):
        increment_metric("not_found_total")
        logger.info(f"[{request.method} {request.url.path}] not found: {exc.object_name}")
        return PlainTextResponse(
            f"Object not found: {exc.object_name}",
            status_code=status.HTTP_404_NOT_FOUND,
        )

    increment_metric("storage_errors_total")
    operation = getattr(exc, "operation", None)
    if isinstance(exc, StorageError):
        context = f"operation={operation} bucket={exc.bucket} key={exc.object_name}"
    else:
        context = f"operation={operation}"
    logger.error(
        f"[{request.method} {request.url.path}] {type(exc).__name__} ({exc.error_code}) "
        f"{context}: {exc.message}"
    )

    if isinstance(exc, ConnectivityError):
        return PlainTextResponse(
            "Storage service unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return PlainTextResponse(
        "Something went wrong!",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_exception_handler)
