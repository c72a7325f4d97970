"""Logging setup for applications embedding Pictor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pictor.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger at ``settings.log_level``."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    # Pillow's plugin loggers emit per-chunk DEBUG records
    logging.getLogger("PIL").setLevel(max(logging.INFO, logging.getLogger().level))
