"""Mini README: Application-wide logging helpers for GiroPositivo.

Structure:
    * get_logger - factory returning module loggers with baseline configuration.
    * configure_root_logger - install the shared handler or adjust its level.

Usage:
    Modules import ``get_logger`` and log computations at DEBUG, state
    changes (journey closures, automatic entries, cascades) at INFO and
    swallowed input problems at WARNING. The handler is installed exactly
    once; later calls such as the command line's ``log_level`` setting only
    change the root level.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: Optional[logging.Handler] = None


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Attach the shared stream handler to the root logger and set ``level``.

    String levels such as ``"debug"`` are accepted so values can come
    straight from settings.
    """

    global _handler
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    if _handler is not None:
        return

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(_handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if _handler is None:
        configure_root_logger()
    return logging.getLogger(name)
