"""Base class for device type handlers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import List, Mapping, Sequence

from ble_soil_sensor.models import SensorDescriptor


def build_registry(descriptors: Sequence[SensorDescriptor]) -> Mapping[str, SensorDescriptor]:
    """Return a read-only identifier -> descriptor mapping."""
    return MappingProxyType({d.identifier: d for d in descriptors})


class DeviceType(ABC):
    """Base class for device type handlers."""

    def __init__(self) -> None:
        """Initialize the device type handler."""
        self._name = "Unknown Device Type"
        self._description = "Unknown Device Type"

    @property
    def name(self) -> str:
        """Return the name of this device type."""
        return self._name

    @property
    def description(self) -> str:
        """Return the description of this device type."""
        return self._description

    @abstractmethod
    def get_sensor_registry(self) -> Mapping[str, SensorDescriptor]:
        """Return the identifier -> descriptor registry of this device type."""

    def get_sensor_descriptors(self) -> List[SensorDescriptor]:
        """Return the descriptors in their documented order."""
        return list(self.get_sensor_registry().values())

    def get_default_positional_order(self) -> List[str]:
        """Return the identifier order used for bare comma separated replies."""
        return list(self.get_sensor_registry())

    @abstractmethod
    def get_write_characteristic(self) -> str:
        """Return the characteristic UUID commands are written to."""

    @abstractmethod
    def get_notify_characteristic(self) -> str:
        """Return the characteristic UUID replies are notified on."""

    def get_characteristics(self) -> List[str]:
        """Return a list of characteristics UUIDs this device uses."""
        return [self.get_write_characteristic(), self.get_notify_characteristic()]

    def get_services(self) -> List[str]:
        """Return a list of service UUIDs this device uses."""
        return []

    def requires_polling(self) -> bool:
        """Return True if this device requires polling."""
        return True
