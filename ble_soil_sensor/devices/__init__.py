"""Device types for the BLE soil sensor client."""
from typing import Dict, List, Optional, Type

from ble_soil_sensor.devices.base import DeviceType
from ble_soil_sensor.devices.soil_tester import LegacySoilTester, SoilTester
from ble_soil_sensor.errors import UnsupportedDeviceTypeError
from ble_soil_sensor.utils.const import DEFAULT_DEVICE_TYPE

DEVICE_TYPE_MAP: Dict[str, Type[DeviceType]] = {
    "soil_tester": SoilTester,
    "legacy_soil_tester": LegacySoilTester,
}


def get_device_type(device_type_name: Optional[str] = None) -> DeviceType:
    """Get a device type instance, defaulting to the five-parameter tester."""
    if device_type_name is None:
        device_type_name = DEFAULT_DEVICE_TYPE

    device_cls = DEVICE_TYPE_MAP.get(device_type_name)
    if device_cls is None:
        raise UnsupportedDeviceTypeError(
            f"Unsupported device type: {device_type_name}. "
            f"Supported types: {', '.join(get_supported_device_types())}"
        )
    return device_cls()


def get_supported_device_types() -> List[str]:
    """Get list of supported device types."""
    return list(DEVICE_TYPE_MAP)
