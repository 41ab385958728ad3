"""Data classes passed between the framing, parsing and calibration stages."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from ble_soil_sensor.utils.const import RESPONSE_TERMINATOR

RawReading = Dict[str, str]

_TERMINATOR_RE = re.compile(re.escape(RESPONSE_TERMINATOR) + r"$", re.IGNORECASE)


@dataclass(frozen=True)
class RawMessage:
    """One complete device reply, terminator included."""

    text: str

    @property
    def body(self) -> str:
        """Return the reply without its terminator."""
        return _TERMINATOR_RE.sub("", self.text).strip()

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class SensorDescriptor:
    """Static description of one sensor parameter."""

    identifier: str
    name: str
    unit: str
    scale: float = 1.0

    @property
    def label(self) -> str:
        """Return the human readable label, e.g. ``Soil pH (pH)``."""
        return f"{self.name} ({self.unit})"


@dataclass(frozen=True)
class CalibratedReading:
    """A calibrated value; ``value`` is None when the sensor is offline or failed."""

    identifier: str
    label: str
    value: Optional[float]
    raw: str = ""

    @property
    def available(self) -> bool:
        return self.value is not None


@dataclass
class ReadingSet:
    """Ordered readings of one measurement reply."""

    readings: List[CalibratedReading] = field(default_factory=list)

    @property
    def data(self) -> List[Optional[float]]:
        return [reading.value for reading in self.readings]

    @property
    def labels(self) -> List[str]:
        return [reading.label for reading in self.readings]

    def as_dict(self) -> Dict[str, Optional[float]]:
        """Return the readings keyed by label."""
        return {reading.label: reading.value for reading in self.readings}

    def get(self, identifier: str) -> Optional[CalibratedReading]:
        """Return the reading for an identifier, if present."""
        for reading in self.readings:
            if reading.identifier == identifier:
                return reading
        return None

    def __iter__(self) -> Iterator[CalibratedReading]:
        return iter(self.readings)

    def __len__(self) -> int:
        return len(self.readings)
