import logging
import os
import sys
from typing import IO, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

LogDev = Union[str, os.PathLike, IO[str], None]


def get_logger(progname: str, level: Union[str, int] = "INFO", logdev: LogDev = None) -> logging.Logger:
    """
    Build the named logger used by a harvesting job.

    Args:
        progname: Logger name, printed on every line
        level: Level name ("DEBUG", "INFO", ...) or number
        logdev: File path or stream to write to, stderr when None

    Calling it again with the same name reconfigures the same logger
    instead of stacking handlers.
    """
    logger = logging.getLogger(progname)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handler: logging.Handler
    if logdev is None:
        handler = logging.StreamHandler(sys.stderr)
    elif isinstance(logdev, (str, os.PathLike)):
        handler = logging.FileHandler(logdev, encoding="utf8")
    else:
        handler = logging.StreamHandler(logdev)

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
