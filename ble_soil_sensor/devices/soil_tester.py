"""Soil tester device types speaking the AT command protocol."""
from __future__ import annotations

from typing import List, Mapping

from ble_soil_sensor.devices.base import DeviceType, build_registry
from ble_soil_sensor.models import SensorDescriptor

# BLE characteristics (transparent UART service)
SOIL_SERVICE_UUID = "49535343-fe7d-4ae5-8fa9-9fafd205e455"
SOIL_WRITE_UUID = "49535343-8841-43f4-a8d4-ecbe34729bb3"
SOIL_NOTIFY_UUID = "49535343-1e4d-4bd9-ba61-23c647249616"

# Parameter identifiers
KEY_SOIL_MOISTURE = "4102"
KEY_SOIL_TEMPERATURE = "4103"
KEY_BATTERY = "4104"
KEY_SOIL_CONDUCTIVITY = "4108"
KEY_SOIL_PH = "4110"

SOIL_TESTER_SENSORS = build_registry(
    [
        SensorDescriptor(KEY_SOIL_MOISTURE, "Soil Moisture", "%", 1000),
        SensorDescriptor(KEY_SOIL_TEMPERATURE, "Soil Temperature", "℃", 1000),
        SensorDescriptor(KEY_BATTERY, "Battery", "%", 1),
        SensorDescriptor(KEY_SOIL_CONDUCTIVITY, "Soil Conductivity", "μS/cm", 1000),
        SensorDescriptor(KEY_SOIL_PH, "Soil pH", "pH", 100),
    ]
)

# Early firmware reported three parameters with a different meaning per id.
LEGACY_SOIL_TESTER_SENSORS = build_registry(
    [
        SensorDescriptor("4102", "Soil Temperature", "℃", 1000),
        SensorDescriptor("4108", "Conductivity", "μS/cm", 1000),
        SensorDescriptor("4110", "Soil Moisture", "%", 1000),
    ]
)


class SoilTester(DeviceType):
    """Five-parameter soil tester."""

    def __init__(self) -> None:
        """Initialize the device type."""
        super().__init__()
        self._name = "soil_tester"
        self._description = "Seeed Soil Tester"

    def get_sensor_registry(self) -> Mapping[str, SensorDescriptor]:
        return SOIL_TESTER_SENSORS

    def get_write_characteristic(self) -> str:
        return SOIL_WRITE_UUID

    def get_notify_characteristic(self) -> str:
        return SOIL_NOTIFY_UUID

    def get_services(self) -> List[str]:
        """Return service UUIDs this device uses."""
        return [SOIL_SERVICE_UUID]


class LegacySoilTester(SoilTester):
    """Soil tester running the three-parameter firmware."""

    def __init__(self) -> None:
        """Initialize the device type."""
        super().__init__()
        self._name = "legacy_soil_tester"
        self._description = "Soil Tester (3-sensor firmware)"

    def get_sensor_registry(self) -> Mapping[str, SensorDescriptor]:
        return LEGACY_SOIL_TESTER_SENSORS
