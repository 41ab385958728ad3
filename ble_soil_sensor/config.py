"""Configuration validation for the BLE soil sensor client."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import voluptuous as vol

from ble_soil_sensor.devices import get_supported_device_types
from ble_soil_sensor.errors import InvalidConfigError
from ble_soil_sensor.utils.const import (CONF_COMMAND_TIMEOUT,
                                         CONF_DEVICE_TYPE,
                                         CONF_MAX_BUFFER_SIZE, CONF_MAC,
                                         CONF_POLL_INTERVAL,
                                         CONF_POSITIONAL_ORDER,
                                         CONF_RETRY_COUNT,
                                         DEFAULT_COMMAND_TIMEOUT,
                                         DEFAULT_DEVICE_TYPE,
                                         DEFAULT_MAX_BUFFER_SIZE,
                                         DEFAULT_POLL_INTERVAL,
                                         DEFAULT_RETRY_COUNT)

_LOGGER = logging.getLogger(__name__)

MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$")
IDENTIFIER_PATTERN = re.compile(r"^[0-9]{4}$")


def valid_mac(value: Any) -> str:
    """Validate MAC address format (XX:XX:XX:XX:XX:XX)."""
    mac = str(value).strip()
    if not MAC_PATTERN.match(mac):
        raise vol.Invalid(f"invalid MAC address: {value}")
    return mac.upper().replace("-", ":")


def valid_identifier(value: Any) -> str:
    """Validate a 4-digit parameter identifier."""
    identifier = str(value).strip()
    if not IDENTIFIER_PATTERN.match(identifier):
        raise vol.Invalid(f"invalid parameter identifier: {value}")
    return identifier


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_MAC): valid_mac,
        vol.Optional(CONF_DEVICE_TYPE, default=DEFAULT_DEVICE_TYPE): vol.In(
            get_supported_device_types()
        ),
        vol.Optional(
            CONF_COMMAND_TIMEOUT, default=DEFAULT_COMMAND_TIMEOUT
        ): vol.All(vol.Coerce(float), vol.Range(min=0.5, max=60)),
        vol.Optional(
            CONF_MAX_BUFFER_SIZE, default=DEFAULT_MAX_BUFFER_SIZE
        ): vol.All(vol.Coerce(int), vol.Range(min=64, max=65536)),
        vol.Optional(CONF_POSITIONAL_ORDER): vol.All([valid_identifier], vol.Length(min=1)),
        vol.Optional(
            CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL
        ): vol.All(vol.Coerce(int), vol.Range(min=5, max=3600)),
        vol.Optional(
            CONF_RETRY_COUNT, default=DEFAULT_RETRY_COUNT
        ): vol.All(vol.Coerce(int), vol.Range(min=1, max=10)),
    }
)


@dataclass(frozen=True)
class SoilSensorConfig:
    """Validated client configuration."""

    mac: str
    device_type: str = DEFAULT_DEVICE_TYPE
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    positional_order: Tuple[str, ...] = field(default_factory=tuple)
    poll_interval: int = DEFAULT_POLL_INTERVAL
    retry_count: int = DEFAULT_RETRY_COUNT

    def as_dict(self) -> Dict[str, Any]:
        return {
            CONF_MAC: self.mac,
            CONF_DEVICE_TYPE: self.device_type,
            CONF_COMMAND_TIMEOUT: self.command_timeout,
            CONF_MAX_BUFFER_SIZE: self.max_buffer_size,
            CONF_POSITIONAL_ORDER: list(self.positional_order),
            CONF_POLL_INTERVAL: self.poll_interval,
            CONF_RETRY_COUNT: self.retry_count,
        }


def build_config(data: Dict[str, Any]) -> SoilSensorConfig:
    """Validate a configuration dict.

    Raises:
        InvalidConfigError: If the data does not match ``CONFIG_SCHEMA``.
    """
    try:
        validated = CONFIG_SCHEMA(dict(data))
    except vol.Invalid as ex:
        _LOGGER.error("Invalid configuration: %s", ex)
        raise InvalidConfigError(str(ex)) from ex

    return SoilSensorConfig(
        mac=validated[CONF_MAC],
        device_type=validated[CONF_DEVICE_TYPE],
        command_timeout=validated[CONF_COMMAND_TIMEOUT],
        max_buffer_size=validated[CONF_MAX_BUFFER_SIZE],
        positional_order=tuple(validated.get(CONF_POSITIONAL_ORDER, ())),
        poll_interval=validated[CONF_POLL_INTERVAL],
        retry_count=validated[CONF_RETRY_COUNT],
    )
