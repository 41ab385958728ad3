"""Custom exceptions for the BLE soil sensor client."""
from __future__ import annotations


class SoilSensorError(Exception):
    """Base class for soil sensor errors."""


class NotConnectedError(SoilSensorError):
    """Raised when a command is issued without an established transport."""


class BusyError(SoilSensorError):
    """Raised when a command is issued while another one is outstanding."""


class CommandTimeoutError(SoilSensorError):
    """Raised when no complete reply arrived before the deadline."""


class DisconnectedError(SoilSensorError):
    """Raised when the transport was lost while a command was outstanding."""


class CommandWriteError(SoilSensorError):
    """Raised when the transport rejected a command write."""


class FramingError(SoilSensorError):
    """Error occurred while assembling a reply from transport fragments."""


class FrameOverflowError(FramingError):
    """Raised when a reply grows past the frame buffer limit without a terminator."""


class MalformedResponseError(SoilSensorError):
    """Raised when no parsing strategy could extract data from a reply."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class NoSensorDataError(SoilSensorError):
    """Raised when a reply parsed but contained no known sensor identifier."""


class UnsupportedDeviceTypeError(SoilSensorError):
    """Raised when an unsupported device type is configured."""


class InvalidConfigError(SoilSensorError):
    """Raised when the client configuration fails validation."""
