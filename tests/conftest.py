"""Test configuration for ble_soil_sensor."""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ble_soil_sensor.calibration import CalibrationMapper
from ble_soil_sensor.config import SoilSensorConfig
from ble_soil_sensor.devices.soil_tester import SOIL_TESTER_SENSORS
from ble_soil_sensor.parsers import ResponseParser
from ble_soil_sensor.session import CommandSession

MEASUREMENT_REPLY = b'{"4102":"24300.0","4108":"O.00","4110":"O.0"}\r\nok\r\n'
DEFAULT_ORDER = ("4102", "4103", "4104", "4108", "4110")


async def issue_and_reply(session, command, *fragments, **kwargs):
    """Issue a command, deliver the reply fragments and return the result."""
    task = asyncio.create_task(session.issue(command, **kwargs))
    await asyncio.sleep(0)
    for fragment in fragments:
        session.handle_notification(fragment)
    return await task


@pytest.fixture
def mock_transport():
    """Mock connected transport."""
    transport = MagicMock()
    transport.is_connected = True
    transport.write = AsyncMock(return_value=None)
    return transport


@pytest.fixture
def log_sink():
    """Mock log sink."""
    return MagicMock()


@pytest.fixture
def parser(log_sink):
    """Parser chain with the five-parameter order."""
    return ResponseParser(DEFAULT_ORDER, log_sink=log_sink)


@pytest.fixture
def mapper(log_sink):
    """Mapper over the five-parameter registry."""
    return CalibrationMapper(SOIL_TESTER_SENSORS, log_sink=log_sink)


@pytest.fixture
def session(mock_transport, parser, mapper, log_sink):
    """Command session with a short timeout."""
    return CommandSession(mock_transport, parser, mapper, timeout=1.0, log_sink=log_sink)


@pytest.fixture
def config():
    """Client configuration."""
    return SoilSensorConfig(mac="AA:BB:CC:DD:EE:FF", command_timeout=1.0)


@pytest.fixture
def mock_ble_connection():
    """Mock BLE connection used by the coordinator."""
    with patch("ble_soil_sensor.coordinator.BLEConnection") as mock:
        connection = mock.return_value
        connection.is_connected = True
        connection.start = AsyncMock()
        connection.stop = AsyncMock()
        connection.write = AsyncMock(return_value=None)
        yield mock
