from __future__ import annotations

import logging

from watchlist.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once for the process.

    Library modules only create module loggers; the embedding app calls this.
    """
    resolved = (level or settings.log_level or "INFO").upper()
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved)
        return
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
