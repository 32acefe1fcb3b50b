from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "safepath"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach one stream handler to the ``safepath`` logger tree.

    Safe to call repeatedly: the handler is installed once and later calls
    only adjust the level.
    """
    logger = logging.getLogger("safepath")
    logger.setLevel(level)

    if any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def truncate_for_log(value: str, limit: int = 120) -> str:
    rendered = repr(value)
    if len(rendered) <= limit:
        return rendered
    return rendered[: limit - 3] + "..."
