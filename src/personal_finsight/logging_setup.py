# Personal FinSight - Financial Advisory & Projection Engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Structured logging setup for Personal FinSight.

The engine modules obtain their loggers with ``structlog.get_logger(__name__)``
and emit debug events such as ``advice.rule_fired`` or
``expenses.aggregated``. Nothing is configured at import time: library users
keep control of logging, and the CLI calls ``configure_logging`` once at
startup.

Logs go to stderr so that stdout stays reserved for tables, JSON and CSV
output.
"""

import logging
import os
import sys
from typing import Optional

import structlog

DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(level: Optional[str] = None, json_logs: bool = False) -> None:
    """
    Configure stdlib logging and structlog for the current process.

    Parameters
    ----------
    level : str, optional
        Log level name (DEBUG, INFO, WARNING, ...). Defaults to the
        ``LOG_LEVEL`` environment variable, then to WARNING.
    json_logs : bool
        Render one JSON object per line instead of key=value console output.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
