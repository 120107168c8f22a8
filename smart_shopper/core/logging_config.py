"""
Console logging for the API process.

Modules log through `logging.getLogger(__name__)`; request lines come from
`smart_shopper.access` (see `core.middleware`), which replaces uvicorn's own
access log.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that only matter when something goes wrong
NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "httpx", "httpcore", "openai", "pymongo", "motor")


def setup_logging(log_level: str = "INFO") -> None:
    """
    Route all records to stdout with one format.

    Args:
        log_level: Level name for the root and `smart_shopper` loggers;
            unknown names fall back to INFO
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Reloads (uvicorn --reload, tests) would otherwise stack handlers
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("smart_shopper").setLevel(level)
    logging.getLogger(__name__).info(f"Logging configured at {logging.getLevelName(level)}")
