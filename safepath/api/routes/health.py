from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from safepath.core.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def get_health() -> dict[str, object]:
    settings = get_settings()
    files_root_ready = settings.files_root.is_dir()
    # The root location itself is never reported.
    degraded = settings.serve_files and not files_root_ready
    return {
        "status": "degraded" if degraded else "ok",
        "service": settings.app_name,
        "serve_files": settings.serve_files,
        "files_root_ready": files_root_ready,
        "timestamp": datetime.now(tz=timezone.utc),
    }
