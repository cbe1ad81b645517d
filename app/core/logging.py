import logging
import sys
from typing import Optional

from app.core.config import settings

# Loggers that would repeat every probe request at INFO
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure console logging for the probe service.

    Args:
        level: Root level override. Defaults to HTTP_PROBE_LOG_LEVEL.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel((level or settings.log_level).upper())

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
