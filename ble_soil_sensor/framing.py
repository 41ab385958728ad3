"""Reassembly of device replies from BLE notification fragments."""
from __future__ import annotations

import codecs
import logging
import re
from typing import Optional

from ble_soil_sensor.errors import FrameOverflowError
from ble_soil_sensor.models import RawMessage
from ble_soil_sensor.utils.const import (DEFAULT_MAX_BUFFER_SIZE,
                                         RESPONSE_TERMINATOR)

_LOGGER = logging.getLogger(__name__)

COMPLETE_FLAG = re.compile(re.escape(RESPONSE_TERMINATOR) + r"$", re.IGNORECASE)


class FrameBuffer:
    """Accumulate fragments until a reply ends with ``\\r\\nok\\r\\n``."""

    def __init__(self, max_size: int = DEFAULT_MAX_BUFFER_SIZE) -> None:
        """Initialize the buffer."""
        self.max_size = max_size
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._cache = ""

    @property
    def pending(self) -> int:
        """Return the number of buffered characters."""
        return len(self._cache)

    def reset(self) -> None:
        """Drop any partially received reply."""
        if self._cache:
            _LOGGER.debug("Discarding %d buffered characters", len(self._cache))
        self._cache = ""
        self._decoder.reset()

    def feed(self, fragment: bytes) -> Optional[RawMessage]:
        """Append a fragment and return the reply once it is complete."""
        text = self._decoder.decode(bytes(fragment))
        _LOGGER.debug("Received fragment: %r", text)
        self._cache += text

        if len(self._cache) > self.max_size:
            size = len(self._cache)
            self.reset()
            raise FrameOverflowError(
                f"Reply exceeded {self.max_size} characters ({size}) without a terminator"
            )

        if not COMPLETE_FLAG.search(self._cache):
            return None

        message = RawMessage(self._cache)
        _LOGGER.debug("Received complete reply: %r", message.text)
        self._cache = ""
        self._decoder.reset()
        return message
