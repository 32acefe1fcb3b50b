from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from safepath.api.deps import encoded_path_tail, rejection_to_http
from safepath.core.config import Settings, get_settings
from safepath.core.path_safety import PathSafetyError, resolve_under_root

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{raw_path:path}")
def get_file_content(request: Request, settings: Settings = Depends(get_settings)) -> FileResponse:
    if not settings.serve_files:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File serving is disabled")

    raw_path = encoded_path_tail(request)
    try:
        target = resolve_under_root(settings.files_root, raw_path)
    except PathSafetyError as exc:
        raise rejection_to_http(exc, raw_path) from exc

    if not target.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return FileResponse(path=target)
