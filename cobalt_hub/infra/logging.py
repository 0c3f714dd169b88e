"""Structured logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger
from cobalt_hub.infra.config import config


def setup_logging():
    """
    Route the ``cobalt_hub`` logger tree to JSON lines on stdout.

    Every line carries the service name and environment so lines from
    several hub instances can be told apart.
    """
    logger = logging.getLogger("cobalt_hub")
    logger.setLevel(logging.DEBUG if config.DEBUG else config.LOG_LEVEL.upper())
    logger.handlers = []

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        rename_fields={"levelname": "level", "asctime": "timestamp"},
        static_fields={"service": "cobalt-hub", "env": config.APP_ENV},
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # httpx logs every connector request at INFO
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logger


app_logger = setup_logging()
