"""
object_controller.py — upload, fetch, and listing handlers

Blocking SDK calls run in the thread pool; bodies are streamed in both
directions through libs.storage.streams.
"""

import html
import logging
import secrets
from typing import Dict, List
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from libs.common.config import AppConfig
from libs.common.exceptions import NotFoundError
from libs.metrics import increment_metric
from libs.storage import ObjectSummary, RequestBodyReader, StorageClient

logger = logging.getLogger(__name__)

PAGE_TITLE = "MinIO object gateway"

HOME_TEMPLATE = """
<html lang="en-US">
  <head>
    <title>{title}</title>
  </head>
  <body>
    <h1>{title}</h1>
    <p>Run following bash command to create a text file:</p>
    <pre>echo "Hello World" &gt; hello.txt</pre>
    <p>Then, run following curl command to upload the file to MinIO storage.</p>
    <pre>curl -X POST -T hello.txt {upload_url}</pre>
    <p>Browse everything uploaded so far at <a href="/objects">/objects</a>.</p>
  </body>
</html>
"""

LISTING_TEMPLATE = """
<html lang="en-US">
  <head>
    <title>{title}</title>
  </head>
  <body>
    <h1>{title}</h1>
    <p>Here are the files you uploaded:</p>
    <ul>
      {items}
    </ul>
  </body>
</html>
"""


def generate_object_name() -> str:
    """128 random bits, hex encoded."""
    return secrets.token_hex(16)


def public_base_url(request: Request, config: AppConfig) -> str:
    return config.server.public_url or str(request.base_url).rstrip("/")


def object_path(object_name: str) -> str:
    return "/objects/" + quote(object_name, safe="/")


# -------------------------------------------------------------------------
# GET /
# -------------------------------------------------------------------------
def render_home(request: Request, config: AppConfig) -> HTMLResponse:
    upload_url = html.escape(public_base_url(request, config) + "/upload")
    return HTMLResponse(HOME_TEMPLATE.format(title=PAGE_TITLE, upload_url=upload_url))


# -------------------------------------------------------------------------
# POST /upload
# -------------------------------------------------------------------------
async def handle_upload(request: Request, storage: StorageClient, config: AppConfig) -> Response:
    """
    Stream the raw request body into a new object under a generated key.
    Returns a plain-text locator for the stored object.
    """
    bucket = config.minio.bucket
    object_name = generate_object_name()
    content_type = request.headers.get("content-type") or "application/octet-stream"
    reader = RequestBodyReader(request.stream())

    try:
        # length is never trusted from the client; the SDK streams multipart
        await run_in_threadpool(storage.put_object, bucket, object_name, reader, -1, content_type)
    except ClientDisconnect:
        logger.warning(f"[upload] Client disconnected after {reader.bytes_read} bytes, key={object_name}")
        return PlainTextResponse("Upload aborted: client disconnected", status_code=400)

    increment_metric("uploads_total")
    increment_metric("upload_bytes_total", reader.bytes_read)
    logger.info(f"[upload] Stored {bucket}/{object_name} ({reader.bytes_read} bytes, {content_type})")

    url = public_base_url(request, config) + object_path(object_name)
    return PlainTextResponse(f"Your file is now available at {url} !")


# -------------------------------------------------------------------------
# GET /objects/{name}
# -------------------------------------------------------------------------
async def handle_fetch(
    object_name: str, storage: StorageClient, config: AppConfig, head_only: bool = False
) -> Response:
    """Stream an object back with the backend's content type and length."""
    if not object_name:
        raise NotFoundError("Empty object name", operation="get_object", bucket=config.minio.bucket, object_name="")
    obj = await run_in_threadpool(storage.get_object, config.minio.bucket, object_name)

    headers = {"Content-Type": obj.content_type}
    if obj.content_length is not None:
        headers["Content-Length"] = str(obj.content_length)

    if head_only:
        await run_in_threadpool(obj.close)
        return Response(headers=headers)

    increment_metric("downloads_total")
    logger.debug(f"[fetch] Streaming {obj.bucket}/{object_name}")
    return StreamingResponse(
        obj.iter_chunks(),
        headers=headers,
        background=BackgroundTask(obj.close),
    )


# -------------------------------------------------------------------------
# GET /objects
# -------------------------------------------------------------------------
def _drain_listing(storage: StorageClient, bucket: str) -> List[ObjectSummary]:
    # not paginated: the whole bucket is listed on every request
    return list(storage.list_objects(bucket))


def _accept_weights(header: str) -> Dict[str, float]:
    """media type -> q value for each entry of an Accept header."""
    weights = {}
    for entry in header.split(","):
        media_type, *params = [part.strip() for part in entry.split(";")]
        if not media_type:
            continue
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        weights[media_type.lower()] = q
    return weights


def _wants_json(request: Request, fmt: str = None) -> bool:
    if fmt:
        return fmt.lower() == "json"
    accept = _accept_weights(request.headers.get("accept", ""))
    return accept.get("application/json", 0.0) > accept.get("text/html", 0.0)


async def handle_list(request: Request, storage: StorageClient, config: AppConfig, fmt: str = None) -> Response:
    """Render every object in the bucket as HTML links or a JSON payload."""
    bucket = config.minio.bucket
    objects = await run_in_threadpool(_drain_listing, storage, bucket)
    increment_metric("listings_total")
    logger.info(f"[list] {len(objects)} objects in {bucket}")

    if _wants_json(request, fmt):
        base = public_base_url(request, config)
        return JSONResponse({
            "bucket": bucket,
            "count": len(objects),
            "objects": [
                {**obj.to_dict(), "url": base + object_path(obj.name)}
                for obj in objects
            ],
        })

    items = "".join(
        f'<li><a href="{html.escape(object_path(obj.name))}">{html.escape(obj.name)}</a></li>'
        for obj in objects
    )
    return HTMLResponse(LISTING_TEMPLATE.format(title=PAGE_TITLE, items=items))
