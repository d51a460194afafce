import logging
import sys

import structlog

from . import config


def configure_logging():
    """
    Sends structlog events through the standard library root logger.

    Events are key/value pairs (region codes, row counts, error codes), so
    development gets the console renderer and every other ENV gets one JSON
    object per line.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.ENV.lower() == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.LOG_LEVEL, logging.INFO)),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=config.LOG_LEVEL)

    # uvicorn installs its own handlers; hand its records to the root logger instead
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
