"""Logging configuration for the application.

Query cache hit/miss/write records are emitted at INFO by
querymemo.infrastructure.cache; per-key store traffic is DEBUG only.
"""

import logging
import sys

from querymemo.core.config import get_settings

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure application-wide logging to stdout.

    Level is DEBUG when settings.debug is True, otherwise INFO. The redis
    client library is held at WARNING so reconnect chatter does not drown
    out the query cache records.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("redis").setLevel(logging.WARNING)
