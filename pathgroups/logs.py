"""Diagnostic logging setup.

Modules log through ``logging.getLogger(__name__)`` at debug level. The
package logger follows the host's logging configuration unless debug
diagnostics are switched on, which adds a stderr handler.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "pathgroups"
LOG_FORMAT = "[%(name)s] %(message)s"

_handler: logging.Handler | None = None


def configure_logging(debug: bool) -> None:
    """Enable or disable debug diagnostics on stderr for the package logger.

    Disabling only undoes what an earlier ``configure_logging(True)`` set up;
    levels and handlers configured by an embedding host are left alone.
    """
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    if not debug:
        if _handler is not None:
            logger.removeHandler(_handler)
            _handler = None
            logger.setLevel(logging.NOTSET)
        return
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    logger.setLevel(logging.DEBUG)


__all__ = ["LOGGER_NAME", "configure_logging"]
