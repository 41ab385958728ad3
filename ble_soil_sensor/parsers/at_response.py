"""Parsing strategies for AT command replies.

Firmware releases disagree on the reply format. Seen in the field:

    {"4102":"24300.0","4108":"O.00","4110":"O.0"}
    {4102:24300.0,4104:87}
    4102:24300.0,4104=87
    {'4102': O.00}
    24300.0,O.00,O.0

Each strategy below handles one family of these shapes. They are tried in
order by :class:`ble_soil_sensor.parsers.ResponseParser`.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ble_soil_sensor.models import RawReading
from ble_soil_sensor.parsers.base import BaseParser

_LOGGER = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[0-9]{4}$")

# "4102":"24300.0" / 4102:24300.0 / 4102=24300.0 / '4102' = 'O.00'
PAIR_RE = re.compile(
    r"""(?<![0-9.])([0-9]{4})["']?\s*[:=]\s*["']*(-?[A-Za-z0-9.]+)["']*"""
)

# 4102 -> 24300.0 / 4102 | O.00
LOOSE_PAIR_RE = re.compile(
    r"(?<![0-9.])([0-9]{4})(?![0-9])[^0-9A-Za-z]+?(-?[0-9A-Za-z.]+)"
)

ERROR_TOKEN_RE = re.compile(r"^[Oo]\.?[0-9]*$")
NUMERIC_TOKEN_RE = re.compile(r"^-?[0-9]+(?:\.[0-9]+)?$")
BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z0-9_.\-]+)\s*:")
BARE_VALUE_RE = re.compile(r"(:\s*)([^\s\"{}\[\],][^\"{}\[\],]*?)(\s*)(?=[,}])")
TRAILING_COMMA_RE = re.compile(r",\s*}")
TOKEN_SPLIT_RE = re.compile(r"[,;\s]+")

CANONICAL_ERROR_TOKEN = "ERROR"
JSON_LITERALS = ("true", "false", "null")


def object_span(text: str) -> Optional[str]:
    """Return the outermost ``{...}`` span of the text, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start:end + 1]


def decode_object(text: str) -> Optional[Dict[str, Any]]:
    """Decode JSON object text, returning None when it is not an object."""
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    if not isinstance(decoded, dict):
        return None
    return decoded


def looks_like_object(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith("{") or stripped.endswith("}")


def repair_object(text: str) -> Optional[str]:
    """Rewrite quasi-JSON object text into valid JSON.

    Returns None when the text does not look like an object at all.
    """
    candidate = text.strip()
    if not candidate or not looks_like_object(candidate):
        return None

    if not candidate.startswith("{"):
        candidate = "{" + candidate
    if not candidate.endswith("}"):
        candidate = candidate + "}"

    candidate = candidate.replace("'", '"')
    candidate = BARE_KEY_RE.sub(r'\1"\2":', candidate)

    def _quote_value(match: re.Match) -> str:
        token = match.group(2).strip()
        if token in JSON_LITERALS:
            return match.group(0)
        if ERROR_TOKEN_RE.match(token):
            token = CANONICAL_ERROR_TOKEN
        return f'{match.group(1)}"{token}"{match.group(3)}'

    candidate = BARE_VALUE_RE.sub(_quote_value, candidate)
    return TRAILING_COMMA_RE.sub("}", candidate)


def value_tokens(text: str) -> Optional[List[str]]:
    """Return the tokens of a bare value list, or None for any other shape."""
    body = text.strip().strip("{}[]()")
    tokens = [token.strip("\"'") for token in TOKEN_SPLIT_RE.split(body) if token]
    if not tokens:
        return None
    if not all(NUMERIC_TOKEN_RE.match(t) or ERROR_TOKEN_RE.match(t) for t in tokens):
        return None
    return tokens


def to_raw_reading(values: Dict[str, Any]) -> RawReading:
    """Keep identifier keys with scalar values, converted to strings."""
    reading: RawReading = {}
    for key, value in values.items():
        key = str(key).strip()
        if not IDENTIFIER_RE.match(key):
            _LOGGER.debug("Discarding non-identifier key %r", key)
            continue
        if value is None:
            reading[key] = ""
        elif isinstance(value, bool) or isinstance(value, (dict, list)):
            _LOGGER.debug("Discarding non-scalar value for %s: %r", key, value)
        else:
            reading[key] = str(value).strip()
    return reading


class StrictParser(BaseParser):
    """Decode a well formed JSON object."""

    name = "strict"

    def parse(self, text: str) -> Optional[RawReading]:
        span = object_span(text)
        if span is None:
            return None
        decoded = decode_object(span)
        if decoded is None:
            return None
        return to_raw_reading(decoded) or None


class PatternParser(BaseParser):
    """Collect every ``<id> [:=] <value>`` pair, ignoring surrounding noise."""

    name = "pattern"

    def parse(self, text: str) -> Optional[RawReading]:
        reading: RawReading = {}
        for match in PAIR_RE.finditer(text):
            reading[match.group(1)] = match.group(2)
        return reading or None


class LooseParser(BaseParser):
    """Accept any identifier eventually followed by a value token."""

    name = "loose"

    def parse(self, text: str) -> Optional[RawReading]:
        # Bare value lists belong to the positional strategy.
        if value_tokens(text) is not None:
            return None

        reading: RawReading = {}
        for match in LOOSE_PAIR_RE.finditer(text):
            key, value = match.group(1), match.group(2)
            if key and value:
                reading[key] = value
        return reading or None


class RepairParser(BaseParser):
    """Repair quasi-JSON object syntax, then decode it."""

    name = "repair"

    def parse(self, text: str) -> Optional[RawReading]:
        repaired = repair_object(text)
        if repaired is None:
            return None
        decoded = decode_object(repaired)
        if decoded is None:
            _LOGGER.debug("Repaired text is still not valid JSON: %r", repaired)
            return None
        return to_raw_reading(decoded) or None


class PositionalParser(BaseParser):
    """Assign bare comma separated values to a configured identifier order."""

    name = "positional"

    def __init__(self, order: Sequence[str] = ()) -> None:
        self.order: Tuple[str, ...] = tuple(order)

    def parse(self, text: str) -> Optional[RawReading]:
        if not self.order:
            return None

        tokens = value_tokens(text)
        if tokens is None:
            return None

        if len(tokens) > len(self.order):
            _LOGGER.warning(
                "Reply has %d values but only %d positions are configured, dropping %s",
                len(tokens),
                len(self.order),
                tokens[len(self.order):],
            )
        return dict(zip(self.order, tokens))
