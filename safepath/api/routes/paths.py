from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form

from safepath.api.deps import get_safe_path, rejection_to_http
from safepath.api.schemas.paths import AcceptedPathResponse, PathPayload
from safepath.core.config import Settings, get_settings
from safepath.core.path_safety import PathSafetyError, SafePath, validate_relative_path

router = APIRouter(prefix="/paths", tags=["paths"])


def _accepted(source: str, safe_path: SafePath) -> AcceptedPathResponse:
    return AcceptedPathResponse(source=source, path=safe_path.as_posix(), segments=list(safe_path.segments))


def _anchor_payload(payload: PathPayload, settings: Settings) -> SafePath:
    try:
        return validate_relative_path(payload.path, settings.files_root)
    except PathSafetyError as exc:
        raise rejection_to_http(exc, payload.path) from exc


@router.post("/form", response_model=AcceptedPathResponse)
def accept_form_path(
    payload: Annotated[PathPayload, Form()],
    settings: Settings = Depends(get_settings),
) -> AcceptedPathResponse:
    return _accepted("form", _anchor_payload(payload, settings))


@router.post("/json", response_model=AcceptedPathResponse)
def accept_json_path(payload: PathPayload, settings: Settings = Depends(get_settings)) -> AcceptedPathResponse:
    return _accepted("json", _anchor_payload(payload, settings))


@router.get("/{raw_path:path}", response_model=AcceptedPathResponse)
def accept_url_path(safe_path: SafePath = Depends(get_safe_path)) -> AcceptedPathResponse:
    return _accepted("path", safe_path)
