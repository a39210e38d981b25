# artisan_discovery/core/logging.py
import logging
import sys
from typing import Union

import colorlog

LOG_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

# Driver loggers that would drown the per-request engine lines
NOISY_LOGGERS = ("pymongo", "motor", "asyncio", "httpx")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install one coloured stdout handler on the root logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(colorlog.ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    logging.getLogger("uvicorn.error").setLevel(level)
    # access lines only when debugging; routers already log request/response
    logging.getLogger("uvicorn.access").setLevel(level if level <= logging.DEBUG else logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
