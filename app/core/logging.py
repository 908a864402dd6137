# app/core/logging.py - Logging configuration
import logging
import sys

from app.core.config import settings

LOG_FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging() -> None:
    """Configure root logging from settings"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=LOG_FORMATS[settings.LOG_FORMAT],
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # SQLAlchemy echoes through its own logger when DATABASE_ECHO is on
    if not settings.DATABASE_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
