"""Console logging for Pixelpress.

Request lines come from the app's own middleware on ``pixelpress.access``;
``scripts/run.py`` turns uvicorn's access log off so nothing is logged twice.
``RESIZE_LOG_LEVEL`` tunes ``pixelpress.resize`` on its own, e.g. to see each
quality attempt of the size search without debug output from everything else.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

APP_LOGGER: Final[str] = "pixelpress"
RESIZE_LOGGER: Final[str] = "pixelpress.resize"


def resolve_level(value: str | None, default: int) -> int:
    """Translate a level name or number; unknown values give ``default``."""

    if not value or not value.strip():
        return default

    cleaned = value.strip()
    if cleaned.isdigit():
        return int(cleaned)

    numeric = logging.getLevelName(cleaned.upper())
    return numeric if isinstance(numeric, int) else default


def configure_logging(*, debug: bool = False) -> None:
    """Attach a console handler to the ``pixelpress`` logger tree."""

    app_logger = logging.getLogger(APP_LOGGER)
    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
        app_logger.addHandler(handler)

    app_level = resolve_level(
        os.getenv("LOG_LEVEL"), logging.DEBUG if debug else logging.INFO
    )
    app_logger.setLevel(app_level)

    # NOTSET defers to the app level.
    logging.getLogger(RESIZE_LOGGER).setLevel(
        resolve_level(os.getenv("RESIZE_LOG_LEVEL"), logging.NOTSET)
    )
