"""Process-wide logging setup."""

import logging

from journal.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a single stream handler."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or settings.log_level).upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # Engine echo is controlled separately; keep SQL noise out of INFO logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
