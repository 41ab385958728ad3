"""Client for BLE soil sensors speaking the AT command protocol."""
from ble_soil_sensor.calibration import CalibrationMapper
from ble_soil_sensor.config import SoilSensorConfig, build_config
from ble_soil_sensor.coordinator import SoilSensorCoordinator
from ble_soil_sensor.errors import (BusyError, CommandTimeoutError,
                                    CommandWriteError, DisconnectedError,
                                    FrameOverflowError, FramingError,
                                    InvalidConfigError, MalformedResponseError,
                                    NoSensorDataError, NotConnectedError,
                                    SoilSensorError,
                                    UnsupportedDeviceTypeError)
from ble_soil_sensor.framing import FrameBuffer
from ble_soil_sensor.models import (CalibratedReading, RawMessage, RawReading,
                                    ReadingSet, SensorDescriptor)
from ble_soil_sensor.parsers import ResponseParser
from ble_soil_sensor.session import CommandSession, SessionState

__version__ = "0.1.0"

__all__ = [
    "BusyError",
    "CalibratedReading",
    "CalibrationMapper",
    "CommandSession",
    "CommandTimeoutError",
    "CommandWriteError",
    "DisconnectedError",
    "FrameBuffer",
    "FrameOverflowError",
    "FramingError",
    "InvalidConfigError",
    "MalformedResponseError",
    "NoSensorDataError",
    "NotConnectedError",
    "RawMessage",
    "RawReading",
    "ReadingSet",
    "ResponseParser",
    "SensorDescriptor",
    "SessionState",
    "SoilSensorConfig",
    "SoilSensorCoordinator",
    "SoilSensorError",
    "UnsupportedDeviceTypeError",
    "build_config",
]
