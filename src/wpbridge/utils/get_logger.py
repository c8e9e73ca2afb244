"""
Named console loggers for wpbridge, timestamped in LOG_TIMEZONE.
LOG_LEVEL sets the starting level; set_level changes it for every cached logger.
"""

import logging
import os
from datetime import UTC, datetime

import pytz

TIMEZONE = pytz.timezone(os.getenv("LOG_TIMEZONE", "UTC"))

Logger_Cache: dict[str, logging.Logger] = {}
Default_Level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
if not isinstance(Default_Level, int):
    Default_Level = logging.INFO


def set_level(level):
    global Default_Level
    Default_Level = level
    for logger in Logger_Cache.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


class LocalTimeFormatter(logging.Formatter):
    def format(self, record):
        local_time = datetime.fromtimestamp(record.created, UTC).astimezone(TIMEZONE)

        record.local_time = local_time.strftime("%I:%M:%S %p")
        record.name = record.name[0:20]
        if record.levelno == logging.WARN:
            self._style._fmt = "%(local_time)-10s %(name)-20s:%(levelname)-8s =====> Warning %(message)s"
        elif record.levelno >= logging.ERROR:
            self._style._fmt = "\n%(local_time)-10s %(name)-20s =====> ERROR \n%(message)s\n---END ERROR ---\n"
        else:
            self._style._fmt = "%(local_time)-10s %(name)-20s:%(levelname)-8s %(message)s"

        return super().format(record)


def get_logger(name: str, level=None) -> logging.Logger:
    """Return the cached console logger for `name`."""
    if name in Logger_Cache:
        return Logger_Cache[name]

    if level is None:
        level = Default_Level
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler):
            logger.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(LocalTimeFormatter())
    logger.addHandler(ch)
    logger.propagate = False

    Logger_Cache[name] = logger
    return logger
