"""Conversion of raw reply values into calibrated sensor readings."""
from __future__ import annotations

import logging
import re
from typing import Mapping, Optional

from ble_soil_sensor.errors import NoSensorDataError
from ble_soil_sensor.models import (CalibratedReading, RawReading, ReadingSet,
                                    SensorDescriptor)
from ble_soil_sensor.utils.const import (ERROR_CODE_MEASUREMENT,
                                         ERROR_CODE_SENSOR, SEVERITY_ERROR,
                                         SEVERITY_INFO, SEVERITY_SUCCESS)
from ble_soil_sensor.utils.log_sink import LogSink, emit

_LOGGER = logging.getLogger(__name__)

# Some firmware reports offline probes with the letter O instead of a zero.
LETTER_O_SENTINEL_RE = re.compile(r"^[Oo](\.0*)?$")
ERROR_SENTINELS = frozenset({
    "",
    "ERROR",
    "0.00",
    ERROR_CODE_MEASUREMENT,
    ERROR_CODE_SENSOR,
})
DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def is_error_sentinel(raw_value: str) -> bool:
    """Return True if the raw value reports an offline or failed sensor."""
    value = raw_value.strip()
    return (
        value.upper() in ERROR_SENTINELS
        or LETTER_O_SENTINEL_RE.match(value) is not None
    )


def parse_decimal(raw_value: str) -> Optional[float]:
    """Parse a plain decimal number, returning None for anything else."""
    value = raw_value.strip()
    if not DECIMAL_RE.match(value):
        return None
    return float(value)


class CalibrationMapper:
    """Map identifier/value pairs onto a sensor registry."""

    def __init__(
        self,
        registry: Mapping[str, SensorDescriptor],
        log_sink: Optional[LogSink] = None,
    ) -> None:
        """Initialize the mapper."""
        self.registry = registry
        self.log_sink = log_sink

    def calibrate_value(self, descriptor: SensorDescriptor, raw_value: str) -> Optional[float]:
        """Return the calibrated value, or None for sentinels and garbage."""
        if is_error_sentinel(raw_value):
            emit(
                _LOGGER,
                self.log_sink,
                f"{descriptor.label}: sensor offline or error ({raw_value!r})",
                SEVERITY_ERROR,
            )
            return None

        number = parse_decimal(raw_value)
        if number is None:
            emit(
                _LOGGER,
                self.log_sink,
                f"{descriptor.label}: invalid value {raw_value!r}",
                SEVERITY_ERROR,
            )
            return None

        value = number / descriptor.scale
        emit(
            _LOGGER,
            self.log_sink,
            f"{descriptor.label}: {value:.3f} {descriptor.unit}",
            SEVERITY_SUCCESS,
        )
        return value

    def calibrate(self, raw: RawReading) -> ReadingSet:
        """Return readings for every known identifier, in reply order.

        Raises:
            NoSensorDataError: If no identifier is known to the registry.
        """
        readings = ReadingSet()
        for identifier, raw_value in raw.items():
            descriptor = self.registry.get(identifier)
            if descriptor is None:
                emit(
                    _LOGGER,
                    self.log_sink,
                    f"Unknown sensor parameter {identifier}: {raw_value}",
                    SEVERITY_INFO,
                )
                continue

            readings.readings.append(
                CalibratedReading(
                    identifier=identifier,
                    label=descriptor.label,
                    value=self.calibrate_value(descriptor, raw_value),
                    raw=raw_value,
                )
            )

        if not readings:
            raise NoSensorDataError(
                f"No known sensor parameter in reply ({', '.join(raw) or 'empty'})"
            )
        return readings
