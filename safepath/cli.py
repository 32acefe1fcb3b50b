from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

import uvicorn

from safepath.core.config import get_settings
from safepath.core.logging import configure_logging
from safepath.core.path_safety import Rejected, Safe, validate

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Traversal-safe URL path validation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate raw URL paths against a served root")
    check.add_argument("paths", nargs="+", help="Raw (possibly percent-encoded) paths")
    check.add_argument("--root", type=Path, default=None, help="Served root directory (defaults to SAFEPATH_FILES_ROOT)")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (defaults to SAFEPATH_API_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (defaults to SAFEPATH_API_PORT)")

    return parser.parse_args(argv)


def check_paths(raw_paths: Sequence[str], root: Path) -> int:
    rejected = 0
    for raw in raw_paths:
        outcome = validate(raw, root)
        record: dict[str, object] = {"input": raw}
        if isinstance(outcome, Safe):
            record.update(status="safe", path=str(outcome.path.path))
        elif isinstance(outcome, Rejected):
            rejected += 1
            record.update(status="rejected", reason=outcome.reason.value, message=outcome.message)
        print(json.dumps(record, ensure_ascii=False))
    return 1 if rejected else 0


def serve(host: str | None, port: int | None) -> int:
    settings = get_settings()
    uvicorn.run(
        "safepath.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "check":
        root = args.root.resolve(strict=False) if args.root is not None else settings.files_root
        logger.debug("Checking %d path(s) under %s", len(args.paths), root)
        return check_paths(args.paths, root)
    return serve(args.host, args.port)


if __name__ == "__main__":
    raise SystemExit(main())
