# logging_config.py
"""
structlog setup.

- Development (ENV=development / dev / local): colorized console output
- Anything else: one JSON object per line
"""
import logging
import os
import sys

import structlog

_DEV_ENVS = {"development", "dev", "local"}


def configure_logging(level: str = None, env: str = None) -> None:
     level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
     env = (env or os.getenv("ENV", "development")).lower()

     logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

     if env in _DEV_ENVS:
          renderer = structlog.dev.ConsoleRenderer()
     else:
          renderer = structlog.processors.JSONRenderer()

     structlog.configure(
          processors=[
               structlog.contextvars.merge_contextvars,
               structlog.processors.add_log_level,
               structlog.processors.TimeStamper(fmt="iso", utc=True),
               structlog.processors.StackInfoRenderer(),
               structlog.processors.format_exc_info,
               renderer,
          ],
          wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
          cache_logger_on_first_use=True,
     )
