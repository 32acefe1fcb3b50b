from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request, status

from safepath.core.config import Settings, get_settings
from safepath.core.logging import truncate_for_log
from safepath.core.path_safety import PathSafetyError, SafePath, validate_relative_path

logger = logging.getLogger(__name__)

PATH_PARAM = "raw_path"


def rejection_to_http(exc: PathSafetyError, raw_path: str) -> HTTPException:
    logger.warning("Rejected path %s: %s", truncate_for_log(raw_path), exc.reason.value)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"reason": exc.reason.value, "message": str(exc)},
    )


def encoded_path_tail(request: Request) -> str:
    """Return the ``{raw_path:path}`` tail exactly as the client encoded it.

    Starlette hands routes an already percent-decoded parameter, so the tail
    is cut from the ASGI ``raw_path`` after the route's literal prefix. When
    the server omits ``raw_path`` or the prefix itself was encoded, the
    decoded parameter is re-escaped so it decodes back to the same value.
    """
    decoded = request.path_params[PATH_PARAM]
    raw_bytes = request.scope.get("raw_path")
    route = request.scope.get("route")
    if raw_bytes is None or route is None:
        return quote(decoded, safe="/")

    # Some servers leave the query string attached.
    raw = raw_bytes.decode("latin-1").split("?", 1)[0]
    root_path = request.scope.get("root_path", "")
    if root_path and raw.startswith(root_path):
        raw = raw[len(root_path) :]

    prefix = route.path.split("{", 1)[0]
    if not raw.startswith(prefix):
        return quote(decoded, safe="/")
    return raw[len(prefix) :]


def get_safe_path(request: Request, settings: Settings = Depends(get_settings)) -> SafePath:
    raw_path = encoded_path_tail(request)
    try:
        return validate_relative_path(raw_path, settings.files_root)
    except PathSafetyError as exc:
        raise rejection_to_http(exc, raw_path) from exc
