"""Diagnostics support for the BLE soil sensor client."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping

from ble_soil_sensor.errors import MalformedResponseError
from ble_soil_sensor.utils.const import CONF_MAC

_LOGGER = logging.getLogger(__name__)

TO_REDACT = {CONF_MAC}
REDACTED = "**REDACTED**"


def redact_data(data: Mapping[str, Any], to_redact: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of the mapping with sensitive keys masked."""
    keys = set(to_redact)
    return {
        key: REDACTED if key in keys else value
        for key, value in data.items()
    }


def get_diagnostics(coordinator) -> Dict[str, Any]:
    """Return diagnostics for a coordinator."""
    session = coordinator.session
    device_type = coordinator.device_type

    device_info = {
        "device_type": device_type.name,
        "description": device_type.description,
        "services": device_type.get_services(),
        "characteristics": device_type.get_characteristics(),
        "sensors": {
            d.identifier: d.label for d in device_type.get_sensor_descriptors()
        },
    }

    connection_info = {
        "connected": coordinator.connected,
        "available": coordinator.available,
    }

    last_error = session.last_error
    session_info = {
        "state": session.state.value,
        "pending_command": session.pending_command,
        "timeout": session.timeout,
        "buffered_characters": session.frame_buffer.pending,
        "last_message": session.last_message.text if session.last_message else None,
        "last_error": repr(last_error) if last_error else None,
    }
    if isinstance(last_error, MalformedResponseError):
        session_info["last_error_raw"] = last_error.raw

    diagnostic_data = {
        "config": redact_data(coordinator.config.as_dict(), TO_REDACT),
        "device_info": device_info,
        "connection_info": connection_info,
        "session_info": session_info,
        "last_update_success": coordinator.last_update_success,
    }

    if coordinator.data:
        diagnostic_data["device_data"] = coordinator.data.as_dict()

    _LOGGER.debug("Collected diagnostics for %s", device_type.name)
    return diagnostic_data
