# utils/logger.py
import logging
import os
import sys
from config.paths import LOG_PATH

# Package loggers that write to the run log; module loggers inherit from these
LOGGER_NAMES = ("scheduler", "api", "utils")

FILE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
STREAM_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def build_handlers(log_path=LOG_PATH):
    """File handler for the run log and a stdout handler (docker logs)."""
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(STREAM_FORMAT))
    return [file_handler, stream_handler]


def setup_logging(level=None, log_path=LOG_PATH):
    """
    Attach the shared handlers to every package logger.

    The level comes from `level`, else the LOG_LEVEL environment variable, else INFO.
    Calling it again only updates the level; handlers are attached once.
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    handlers = None
    for name in LOGGER_NAMES:
        pkg_logger = logging.getLogger(name)
        pkg_logger.setLevel(level)
        if pkg_logger.handlers:
            continue
        if handlers is None:
            handlers = build_handlers(log_path)
        for handler in handlers:
            pkg_logger.addHandler(handler)
    return logging.getLogger(LOGGER_NAMES[0])


logger = setup_logging()
