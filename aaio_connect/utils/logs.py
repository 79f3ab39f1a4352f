import logging
import sys
from typing import Optional

from ..settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Один stream-хендлер на логгер пакета, повторный вызов только меняет уровень."""
    logger = logging.getLogger("aaio_connect")
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not any(h.get_name() == "aaio_connect" for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name("aaio_connect")
        logger.addHandler(handler)
    return logger
