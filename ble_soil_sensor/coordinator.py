"""Command front end and polling for one soil sensor."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from bleak.backends.device import BLEDevice

from ble_soil_sensor.calibration import CalibrationMapper
from ble_soil_sensor.config import SoilSensorConfig
from ble_soil_sensor.devices import get_device_type
from ble_soil_sensor.errors import CommandTimeoutError, SoilSensorError
from ble_soil_sensor.framing import FrameBuffer
from ble_soil_sensor.models import ReadingSet
from ble_soil_sensor.parsers import ResponseParser
from ble_soil_sensor.session import CommandSession
from ble_soil_sensor.utils.bluetooth import BLEConnection
from ble_soil_sensor.utils.const import (CMD_CONFIG, CMD_DEVICE_INFO,
                                         CMD_MEASURE, CMD_RESTORE,
                                         CMD_SENSOR_LIST, SEVERITY_ERROR,
                                         SEVERITY_INFO, SEVERITY_SUCCESS,
                                         SEVERITY_WARNING)
from ble_soil_sensor.utils.log_sink import LogSink, emit

_LOGGER = logging.getLogger(__name__)


class SoilSensorCoordinator:
    """Own the connection and command session of one soil sensor."""

    def __init__(
        self,
        config: SoilSensorConfig,
        log_sink: Optional[LogSink] = None,
    ) -> None:
        """Initialize the coordinator."""
        self.config = config
        self.log_sink = log_sink
        self.device_type = get_device_type(config.device_type)

        positional_order = (
            config.positional_order or self.device_type.get_default_positional_order()
        )
        self.ble_connection = BLEConnection(
            self.device_type,
            data_callback=self._handle_data,
            disconnect_callback=self._handle_disconnect,
        )
        self.session = CommandSession(
            self.ble_connection,
            ResponseParser(positional_order, log_sink=log_sink),
            CalibrationMapper(self.device_type.get_sensor_registry(), log_sink=log_sink),
            timeout=config.command_timeout,
            frame_buffer=FrameBuffer(config.max_buffer_size),
            log_sink=log_sink,
        )

        self.data: Optional[ReadingSet] = None
        self.available = False
        self.last_update: float = 0
        self.last_update_success = False

    @property
    def connected(self) -> bool:
        return self.ble_connection.is_connected

    async def async_connect(self, ble_device: BLEDevice) -> None:
        """Connect to the sensor."""
        _LOGGER.info("Connecting to soil sensor %s", self.config.mac)
        await self.ble_connection.start(ble_device)
        self.available = True
        emit(_LOGGER, self.log_sink, f"Connected to {self.config.mac}", SEVERITY_SUCCESS)

    async def async_disconnect(self) -> None:
        """Fail any outstanding command and disconnect."""
        self.session.close()
        await self.ble_connection.stop()
        self.available = False
        emit(_LOGGER, self.log_sink, f"Disconnected from {self.config.mac}", SEVERITY_INFO)

    async def async_get_sensor_data(self) -> ReadingSet:
        """Measure and return calibrated readings.

        Timeouts are retried up to ``retry_count`` attempts; every other
        failure is raised to the caller immediately.
        """
        attempts = self.config.retry_count
        for attempt in range(attempts):
            try:
                readings = await self.session.issue(CMD_MEASURE)
            except CommandTimeoutError as ex:
                emit(
                    _LOGGER,
                    self.log_sink,
                    f"Measurement attempt {attempt + 1}/{attempts} timed out",
                    SEVERITY_WARNING,
                )
                if attempt + 1 == attempts:
                    emit(_LOGGER, self.log_sink, f"Measurement failed: {ex}", SEVERITY_ERROR)
                    raise
                continue
            except SoilSensorError as ex:
                emit(_LOGGER, self.log_sink, f"Measurement failed: {ex}", SEVERITY_ERROR)
                raise

            emit(
                _LOGGER,
                self.log_sink,
                f"Received {len(readings)} sensor readings",
                SEVERITY_SUCCESS,
            )
            return readings

        raise CommandTimeoutError("Measurement was not attempted")

    async def async_get_device_info(self) -> Dict[str, Any]:
        """Return the device information object."""
        return await self.session.issue(CMD_DEVICE_INFO)

    async def async_get_sensor_list(self) -> Dict[str, Any]:
        """Return the list of probes the device reports."""
        return await self.session.issue(CMD_SENSOR_LIST)

    async def async_configure(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Send device settings as a JSON payload."""
        return await self.session.issue(CMD_CONFIG, settings)

    async def async_restore_factory(self) -> Dict[str, Any]:
        """Restore factory settings on the device."""
        _LOGGER.warning("Restoring factory settings on %s", self.config.mac)
        return await self.session.issue(CMD_RESTORE)

    def is_update_due(self) -> bool:
        """Determine if the sensor is due for a measurement."""
        return (time.time() - self.last_update) >= self.config.poll_interval

    async def async_update(self) -> Optional[ReadingSet]:
        """Measure if due and cache the result."""
        if not self.is_update_due():
            _LOGGER.debug(
                "Sensor %s not due for update yet (last update: %s)",
                self.config.mac,
                self.last_update,
            )
            return self.data

        try:
            self.data = await self.async_get_sensor_data()
        except SoilSensorError as ex:
            _LOGGER.error("Error updating sensor %s: %s", self.config.mac, ex)
            self.last_update_success = False
            self.available = self.connected
            return self.data

        self.last_update = time.time()
        self.last_update_success = True
        self.available = True
        return self.data

    def _handle_data(self, data: bytes) -> None:
        self.session.handle_notification(data)

    def _handle_disconnect(self) -> None:
        self.available = False
        self.session.handle_disconnect()
