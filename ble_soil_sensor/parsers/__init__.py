"""Parsers for soil sensor AT command replies."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ble_soil_sensor.errors import MalformedResponseError
from ble_soil_sensor.models import RawMessage, RawReading
from ble_soil_sensor.parsers.at_response import (LooseParser, PatternParser,
                                                 PositionalParser,
                                                 RepairParser, StrictParser,
                                                 decode_object, object_span,
                                                 repair_object)
from ble_soil_sensor.parsers.base import BaseParser
from ble_soil_sensor.utils.const import (SEVERITY_DEBUG, SEVERITY_ERROR,
                                         SEVERITY_INFO, SEVERITY_WARNING)
from ble_soil_sensor.utils.log_sink import LogSink, emit

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "BaseParser",
    "LooseParser",
    "PatternParser",
    "PositionalParser",
    "RepairParser",
    "ResponseParser",
    "StrictParser",
]


def _body(message: Union[RawMessage, str]) -> Tuple[str, str]:
    if isinstance(message, RawMessage):
        return message.text, message.body
    return message, RawMessage(message).body


class ResponseParser:
    """Run the parsing strategies in order until one extracts data."""

    def __init__(
        self,
        positional_order: Sequence[str] = (),
        log_sink: Optional[LogSink] = None,
    ) -> None:
        """Initialize the parser chain."""
        self.log_sink = log_sink
        self.strategies: Tuple[BaseParser, ...] = (
            StrictParser(),
            PatternParser(),
            LooseParser(),
            RepairParser(),
            PositionalParser(positional_order),
        )

    def parse(self, message: Union[RawMessage, str]) -> RawReading:
        """Return the identifier/value pairs of a measurement reply.

        Raises:
            MalformedResponseError: If no strategy extracted a single pair.
        """
        raw, body = _body(message)
        if not body:
            emit(_LOGGER, self.log_sink, "Reply contained no data", SEVERITY_ERROR)
            raise MalformedResponseError("Reply contained no data", raw)

        for index, strategy in enumerate(self.strategies):
            reading = strategy.parse(body)
            if not reading:
                _LOGGER.debug("Strategy %s found nothing in %r", strategy.name, body)
                continue

            if index:
                emit(
                    _LOGGER,
                    self.log_sink,
                    f"Recovered {len(reading)} parameters with {strategy.name} parsing",
                    SEVERITY_WARNING,
                )
            for key, value in reading.items():
                emit(_LOGGER, self.log_sink, f"Parameter {key}: {value}", SEVERITY_DEBUG)
            return reading

        emit(
            _LOGGER,
            self.log_sink,
            f"Unable to extract sensor data, raw reply: {raw!r}",
            SEVERITY_ERROR,
        )
        raise MalformedResponseError("No parsing strategy matched the reply", raw)

    def parse_document(self, message: Union[RawMessage, str]) -> Dict[str, Any]:
        """Return every key of an object reply, e.g. device information.

        An empty body is a plain acknowledgement and yields an empty dict.
        """
        raw, body = _body(message)
        if not body:
            return {}

        span = object_span(body)
        decoded = decode_object(span) if span is not None else None
        if decoded is None:
            repaired = repair_object(body)
            decoded = decode_object(repaired) if repaired is not None else None
            if decoded is not None:
                emit(_LOGGER, self.log_sink, "Reply required syntax repair", SEVERITY_INFO)

        if decoded is None:
            emit(
                _LOGGER,
                self.log_sink,
                f"Reply is not an object, raw reply: {raw!r}",
                SEVERITY_ERROR,
            )
            raise MalformedResponseError("Reply is not an object", raw)
        return decoded
