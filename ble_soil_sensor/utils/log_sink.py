"""Forwarding of user facing messages to an optional log sink."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from ble_soil_sensor.utils.const import (SEVERITY_DEBUG, SEVERITY_ERROR,
                                         SEVERITY_INFO, SEVERITY_SUCCESS,
                                         SEVERITY_WARNING)

_LOGGER = logging.getLogger(__name__)

LogSink = Callable[[str, str], None]

SEVERITY_LEVELS: Dict[str, int] = {
    SEVERITY_DEBUG: logging.DEBUG,
    SEVERITY_INFO: logging.INFO,
    SEVERITY_SUCCESS: logging.INFO,
    SEVERITY_WARNING: logging.WARNING,
    SEVERITY_ERROR: logging.ERROR,
}


def emit(
    logger: logging.Logger,
    sink: Optional[LogSink],
    message: str,
    severity: str = SEVERITY_INFO,
) -> None:
    """Log a message and mirror it to the sink, if one is attached.

    The sink is best effort: a failing sink never breaks the pipeline.
    """
    logger.log(SEVERITY_LEVELS.get(severity, logging.INFO), message)
    if sink is None:
        return
    try:
        sink(message, severity)
    except Exception:  # pylint: disable=broad-except
        _LOGGER.exception("Log sink raised while handling %r", message)
