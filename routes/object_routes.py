from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from controllers.object_controller import handle_fetch, handle_list, handle_upload, render_home
from libs.common.config import AppConfig
from libs.storage import StorageClient
from routes.deps import get_app_config, get_storage

router = APIRouter(tags=["objects"])


@router.get("/", response_class=HTMLResponse)
def home(request: Request, config: AppConfig = Depends(get_app_config)):
    """Static usage page; never touches storage."""
    return render_home(request, config)


@router.post("/upload")
async def upload(
    request: Request,
    storage: StorageClient = Depends(get_storage),
    config: AppConfig = Depends(get_app_config),
):
    """
    Upload the raw request body as a new object.

    Usage:
        curl -X POST -T hello.txt http://localhost:3000/upload
    """
    return await handle_upload(request, storage, config)


@router.get("/objects")
@router.get("/objects/")
async def list_objects(
    request: Request,
    format: Optional[str] = Query(None, pattern="^(html|json)$"),
    storage: StorageClient = Depends(get_storage),
    config: AppConfig = Depends(get_app_config),
):
    """List every object in the bucket (HTML by default, JSON with ?format=json)."""
    return await handle_list(request, storage, config, fmt=format)


@router.api_route("/objects/{object_name:path}", methods=["GET", "HEAD"])
async def fetch_object(
    request: Request,
    object_name: str,
    storage: StorageClient = Depends(get_storage),
    config: AppConfig = Depends(get_app_config),
):
    """Stream one object by its exact key; HEAD returns the headers only."""
    return await handle_fetch(object_name, storage, config, head_only=request.method == "HEAD")
