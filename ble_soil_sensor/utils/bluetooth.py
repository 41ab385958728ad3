"""Bluetooth transport for the soil sensor AT protocol."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Union

from bleak import BleakClient
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.exc import BleakError
from bleak_retry_connector import establish_connection

from ble_soil_sensor.devices.base import DeviceType
from ble_soil_sensor.errors import CommandWriteError, NotConnectedError

_LOGGER = logging.getLogger(__name__)

CONNECT_TIMEOUT = 20.0  # seconds


class BLEConnection:
    """Class to handle the BLE link to one soil sensor."""

    def __init__(
        self,
        device_type: DeviceType,
        data_callback: Callable[[bytes], None],
        disconnect_callback: Optional[Callable[[], None]] = None,
    ) -> None:
        """Initialize BLE connection handler."""
        self.device_type = device_type
        self.data_callback = data_callback
        self.disconnect_callback = disconnect_callback
        self.client: Optional[BleakClient] = None
        self.device: Optional[BLEDevice] = None
        self._stopping = False

    @property
    def address(self) -> Optional[str]:
        return self.device.address if self.device else None

    @property
    def is_connected(self) -> bool:
        """Return True while the GATT link is up."""
        return self.client is not None and self.client.is_connected

    async def start(self, device: BLEDevice) -> None:
        """Connect to the device and subscribe to reply notifications."""
        self.device = device
        self._stopping = False
        _LOGGER.info("Connecting to %s", device.address)

        try:
            self.client = await establish_connection(
                client_class=BleakClient,
                device=device,
                name=device.address,
                disconnected_callback=self._handle_disconnected,
                timeout=CONNECT_TIMEOUT,
            )
            await self.client.start_notify(
                self.device_type.get_notify_characteristic(),
                self._notification_handler,
            )
        except (BleakError, asyncio.TimeoutError) as ex:
            _LOGGER.error("Failed to connect to %s: %s", device.address, ex)
            await self._disconnect()
            raise NotConnectedError(f"Failed to connect to {device.address}: {ex}") from ex

        _LOGGER.info("Connected to %s", device.address)

    async def stop(self) -> None:
        """Stop notifications and disconnect."""
        self._stopping = True
        if self.client is not None and self.client.is_connected:
            try:
                await self.client.stop_notify(self.device_type.get_notify_characteristic())
            except BleakError as ex:
                _LOGGER.debug("Failed to stop notifications on %s: %s", self.address, ex)
        await self._disconnect()

    async def write(self, data: bytes) -> None:
        """Write a command frame to the device."""
        if not self.is_connected:
            raise NotConnectedError("Device not connected")

        try:
            await self.client.write_gatt_char(
                self.device_type.get_write_characteristic(), data, response=True
            )
        except (BleakError, asyncio.TimeoutError) as ex:
            _LOGGER.error("Failed to write command to %s: %s", self.address, ex)
            raise CommandWriteError(f"Failed to write to {self.address}: {ex}") from ex

    def _notification_handler(
        self, characteristic: Union[BleakGATTCharacteristic, int], data: bytearray
    ) -> None:
        """Forward one notification fragment."""
        _LOGGER.debug("Notification from %s: %s", self.address, bytes(data).hex())
        try:
            self.data_callback(bytes(data))
        except Exception as ex:  # pylint: disable=broad-except
            _LOGGER.exception("Error handling notification from %s: %s", self.address, ex)

    def _handle_disconnected(self, client: BleakClient) -> None:
        """Handle disconnection callback from BleakClient."""
        _LOGGER.debug("%s disconnected", self.address)
        if self.disconnect_callback is not None and not self._stopping:
            self.disconnect_callback()

    async def _disconnect(self) -> None:
        """Disconnect from device."""
        client, self.client = self.client, None
        if client is not None and client.is_connected:
            try:
                await client.disconnect()
            except BleakError as ex:
                _LOGGER.debug("Error while disconnecting from %s: %s", self.address, ex)
