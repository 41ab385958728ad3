"""Test the BLE connection."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bleak.exc import BleakError

from ble_soil_sensor.devices import get_device_type
from ble_soil_sensor.devices.soil_tester import (SOIL_NOTIFY_UUID,
                                                 SOIL_WRITE_UUID)
from ble_soil_sensor.errors import CommandWriteError, NotConnectedError
from ble_soil_sensor.utils.bluetooth import BLEConnection


@pytest.fixture
def mock_client():
    """Mock connected bleak client."""
    client = MagicMock()
    client.is_connected = True
    client.start_notify = AsyncMock()
    client.stop_notify = AsyncMock()
    client.write_gatt_char = AsyncMock()
    client.disconnect = AsyncMock()
    return client


@pytest.fixture
def mock_establish(mock_client):
    """Patch establish_connection to return the mock client."""
    with patch(
        "ble_soil_sensor.utils.bluetooth.establish_connection",
        AsyncMock(return_value=mock_client),
    ) as mock:
        yield mock


@pytest.fixture
def ble_device():
    """Mock BLE device."""
    device = MagicMock()
    device.address = "AA:BB:CC:DD:EE:FF"
    return device


@pytest.fixture
def connection():
    """BLE connection for the five-parameter tester."""
    return BLEConnection(
        get_device_type("soil_tester"),
        data_callback=MagicMock(),
        disconnect_callback=MagicMock(),
    )


async def test_start_subscribes_to_notifications(
    connection, mock_establish, mock_client, ble_device
):
    """Test connecting enables reply notifications."""
    await connection.start(ble_device)

    assert connection.is_connected
    assert connection.address == "AA:BB:CC:DD:EE:FF"
    assert mock_establish.call_args.kwargs["device"] is ble_device
    mock_client.start_notify.assert_awaited_once_with(
        SOIL_NOTIFY_UUID, connection._notification_handler
    )


async def test_start_failure(connection, mock_establish, ble_device):
    """Test connection errors surface as NotConnectedError."""
    mock_establish.side_effect = BleakError("out of range")

    with pytest.raises(NotConnectedError):
        await connection.start(ble_device)

    assert not connection.is_connected


async def test_write(connection, mock_establish, mock_client, ble_device):
    """Test command frames go to the write characteristic."""
    await connection.start(ble_device)

    await connection.write(b"AT+MEA=?\r\n")

    mock_client.write_gatt_char.assert_awaited_once_with(
        SOIL_WRITE_UUID, b"AT+MEA=?\r\n", response=True
    )


async def test_write_not_connected(connection):
    """Test writing before connecting."""
    with pytest.raises(NotConnectedError):
        await connection.write(b"AT+MEA=?\r\n")


async def test_write_failure(connection, mock_establish, mock_client, ble_device):
    """Test GATT write errors surface as CommandWriteError."""
    await connection.start(ble_device)
    mock_client.write_gatt_char.side_effect = BleakError("write failed")

    with pytest.raises(CommandWriteError):
        await connection.write(b"AT+MEA=?\r\n")


def test_notification_forwards_bytes(connection):
    """Test notification payloads reach the data callback."""
    connection._notification_handler(MagicMock(), bytearray(b"\r\nok\r\n"))

    connection.data_callback.assert_called_once_with(b"\r\nok\r\n")


def test_notification_callback_error_is_logged(connection):
    """Test a failing data callback does not break the notify loop."""
    connection.data_callback.side_effect = ValueError("bad")

    connection._notification_handler(MagicMock(), bytearray(b"x"))


async def test_stop(connection, mock_establish, mock_client, ble_device):
    """Test stopping disables notifications and disconnects."""
    await connection.start(ble_device)

    await connection.stop()

    mock_client.stop_notify.assert_awaited_once_with(SOIL_NOTIFY_UUID)
    mock_client.disconnect.assert_awaited_once()
    assert not connection.is_connected


async def test_unexpected_disconnect_is_reported(
    connection, mock_establish, mock_client, ble_device
):
    """Test the disconnect callback runs for link loss only."""
    await connection.start(ble_device)

    connection._handle_disconnected(mock_client)
    connection.disconnect_callback.assert_called_once()

    await connection.stop()
    connection._handle_disconnected(mock_client)
    connection.disconnect_callback.assert_called_once()
