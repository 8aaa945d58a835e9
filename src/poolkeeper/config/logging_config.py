"""
Logging for the pool control plane.

Service modules log through `logging.getLogger(__name__)`; build, submit and
apply events go out at INFO, ledger rejections at WARNING and a confirmed
transaction that could not be recorded at CRITICAL.
"""

import logging
import sys

from poolkeeper.config.settings import get_settings


def setup_logging() -> None:
    """Send PoolKeeper logs to stdout at the configured level."""
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Mirror/gateway HTTP traffic and SQL statements stay quiet unless they fail
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
