import logging
import os
import sys

import structlog

from mh_knapsack.config import ENV_PREFIX


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_LEVEL_ENV = f"{ENV_PREFIX}_LOG_LEVEL"
JSON_LOGS_ENV = f"{ENV_PREFIX}_JSON_LOGS"


def configure_logging(level: str = "WARNING", json: bool = False) -> None:
    """Configure structlog to write leveled events to stderr.

    stdout is left to the CLI output so results can be piped.
    """
    renderer = (
        structlog.processors.JSONRenderer(indent=2)
        if json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        # Resolve sys.stderr per logger so redirected streams are honoured.
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_logging_from_env() -> None:
    """Configure logging from MH_KNAPSACK_LOG_LEVEL and MH_KNAPSACK_JSON_LOGS.

    Used by server processes, which never see the CLI options.
    """
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if level.upper() not in LOG_LEVELS:
        level = "WARNING"
    json = os.environ.get(JSON_LOGS_ENV, "").lower() in ("1", "true", "yes", "on")
    configure_logging(level, json=json)
