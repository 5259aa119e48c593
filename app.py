#!/usr/bin/env python3
"""
FastAPI app for the MinIO object gateway.
"""
import os
import sys
import time
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from controllers.exception_handlers import register_exception_handlers
from libs.common.config import AppConfig
from libs.common.exceptions import ServiceError
from libs.common.logging import setup_logging
from libs.metrics import export_metrics
from libs.storage import StorageClient, bootstrap_storage

# Routers
from routes.object_routes import router as object_router

logger = logging.getLogger(__name__)


def _load_env_file() -> None:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"[env:loaded] {env_path}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run storage bootstrap before serving; any failure aborts startup."""
    logger.info("[startup] object-gateway starting up...")
    if app.state.config is None:
        _load_env_file()
        app.state.config = AppConfig.from_env()
        setup_logging(app.state.config.server.log_level)
    app.state.config.validate()
    if app.state.storage is None:
        app.state.storage = await run_in_threadpool(bootstrap_storage, app.state.config.minio)
    logger.info(f"[startup] Ready, serving bucket \"{app.state.config.minio.bucket}\"")
    yield
    logger.info("[shutdown] object-gateway shutting down...")


def create_app(config: Optional[AppConfig] = None, storage: Optional[StorageClient] = None) -> FastAPI:
    """
    Build the application.

    ``config`` is read from the environment at startup when omitted;
    ``storage`` is bootstrapped at startup when omitted.
    """
    app = FastAPI(title="object-gateway", lifespan=lifespan)
    app.state.config = config
    app.state.storage = storage

    register_exception_handlers(app)

    # -------------------- Include Routers --------------------
    app.include_router(object_router)

    # -------------------- Health Check --------------------
    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": time.strftime("%Y-%m-%d %H:%M:%S")}

    @app.get("/health/storage")
    def health_storage(request: Request):
        """Check that the storage backend answers and the bucket is there."""
        bucket = request.app.state.config.minio.bucket
        try:
            exists = request.app.state.storage.bucket_exists(bucket)
            return {"storage_ok": True, "bucket": bucket, "bucket_exists": exists}
        except ServiceError as e:
            logger.error(f"[health_storage] error: {e}")
            return {"storage_ok": False, "bucket": bucket, "error": e.message}

    @app.get("/health/metrics")
    def health_metrics():
        """Transfer counters since start."""
        return export_metrics()

    return app


app = create_app()


def main() -> None:
    """Bootstrap storage, then serve. Exits non-zero if bootstrap fails."""
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
    _load_env_file()

    try:
        config = AppConfig.from_env()
        setup_logging(config.server.log_level)
        config.validate()
        storage = bootstrap_storage(config.minio)
    except ServiceError as e:
        logger.error(f"[startup] {type(e).__name__}: {e.message}")
        sys.exit(1)

    logger.info(f"[startup] Server starting on port {config.server.port}")
    uvicorn.run(
        create_app(config, storage),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
