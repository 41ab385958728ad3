"""Base class for reply parsing strategies."""
from typing import Optional

from ble_soil_sensor.models import RawReading


class BaseParser:
    """Base class for reply parsing strategies.

    A strategy is stateless: it receives the reply body with the terminator
    removed and returns the extracted identifier/value pairs, or None when
    the body does not have the shape it understands.
    """

    name = "base"

    def parse(self, text: str) -> Optional[RawReading]:
        """Parse reply text. Must be implemented by subclasses."""
        raise NotImplementedError
