"""
Loguru configuration: stderr plus one file per level.

Each level gets its own file (``info.log``, ``warning.log`` ...) so a grep
over ``error.log`` shows storage failures only. File sinks are skipped when
``LOG_TO_FILES`` is off, which the test suite relies on.
"""
import os
import sys

from loguru import logger

from app.core.config import settings

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOGS_LEVELS = ["DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {file} | {message}"


def resolve_log_dir(log_dir: str) -> str:
    return log_dir if os.path.isabs(log_dir) else os.path.join(BASE_DIR, log_dir)


def configure_logger() -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=settings.LOG_LEVEL)

    if not settings.LOG_TO_FILES:
        return

    log_dir = resolve_log_dir(settings.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    for level in LOGS_LEVELS:
        logger.add(
            os.path.join(log_dir, f"{level.lower()}.log"),
            format=LOG_FORMAT,
            level=level,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression="zip",
            enqueue=True,
            filter=lambda record, lvl=level: record["level"].name == lvl
        )


configure_logger()
