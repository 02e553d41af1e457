import logging
from logging import Logger
from typing import Iterable, Optional

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"
PROJECT_LOGGER = "mofang"
LIBRARY_LOGGERS = ("mofang_core", "mofang_rules")

def setup_logging(
    level: int = logging.INFO,
    *,
    library_level: Optional[int] = None,
    libraries: Iterable[str] = LIBRARY_LOGGERS,
) -> Logger:
    """Configure the root handler and return the logger scripts report through.

    The engine packages log under their module names, so their levels are set
    separately; ``library_level`` defaults to ``level``.
    """
    logging.basicConfig(level=level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)
    for name in libraries:
        logging.getLogger(name).setLevel(level if library_level is None else library_level)
    logger = logging.getLogger(PROJECT_LOGGER)
    logger.setLevel(level)
    logger.debug("Logging initialized.")
    return logger
