"""Command/response correlation for the single-channel AT protocol.

The device has no message ids: one command is written, then the reply
arrives as a series of notifications. The session therefore allows exactly
one outstanding command and routes the next complete reply to it.

All entry points (``issue``, ``handle_notification``, ``handle_disconnect``
and the timeout callback) must run on the same event loop. Bleak delivers
notifications and disconnect callbacks on that loop, so no locking is needed.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from ble_soil_sensor.calibration import CalibrationMapper
from ble_soil_sensor.errors import (BusyError, CommandTimeoutError,
                                    CommandWriteError, DisconnectedError,
                                    FramingError, NotConnectedError,
                                    SoilSensorError)
from ble_soil_sensor.framing import FrameBuffer
from ble_soil_sensor.models import RawMessage
from ble_soil_sensor.parsers import ResponseParser
from ble_soil_sensor.utils.const import (COMMAND_PREFIX, COMMAND_SUFFIX,
                                         DEFAULT_COMMAND_TIMEOUT,
                                         MEASUREMENT_COMMANDS, SEVERITY_DEBUG,
                                         SEVERITY_ERROR, SEVERITY_INFO,
                                         SEVERITY_WARNING)
from ble_soil_sensor.utils.log_sink import LogSink, emit

_LOGGER = logging.getLogger(__name__)


class Transport(Protocol):
    """Byte channel the session writes commands to."""

    @property
    def is_connected(self) -> bool:
        ...

    async def write(self, data: bytes) -> None:
        ...


class SessionState(Enum):
    """Command session states."""

    IDLE = "idle"
    AWAITING = "awaiting"


@dataclass
class PendingCommand:
    """The single outstanding command."""

    command: str
    measurement: bool
    deadline: float
    future: asyncio.Future
    timer: Optional[asyncio.TimerHandle] = None


def build_command(command: str, payload: Any = None) -> bytes:
    """Serialize ``AT+<command>[=<json>]\\r\\n``."""
    text = f"{COMMAND_PREFIX}{command}"
    if payload is not None:
        text += "=" + json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return (text + COMMAND_SUFFIX).encode("utf-8")


class CommandSession:
    """Serialize commands and resolve each one with its parsed reply."""

    def __init__(
        self,
        transport: Transport,
        parser: ResponseParser,
        mapper: CalibrationMapper,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        frame_buffer: Optional[FrameBuffer] = None,
        log_sink: Optional[LogSink] = None,
    ) -> None:
        """Initialize the session."""
        self.transport = transport
        self.parser = parser
        self.mapper = mapper
        self.timeout = timeout
        self.frame_buffer = frame_buffer or FrameBuffer()
        self.log_sink = log_sink
        self.last_message: Optional[RawMessage] = None
        self.last_error: Optional[SoilSensorError] = None
        self._pending: Optional[PendingCommand] = None

    @property
    def state(self) -> SessionState:
        """Return the current session state."""
        return SessionState.IDLE if self._pending is None else SessionState.AWAITING

    @property
    def pending_command(self) -> Optional[str]:
        """Return the outstanding command name, if any."""
        return self._pending.command if self._pending else None

    async def issue(
        self,
        command: str,
        payload: Any = None,
        *,
        measurement: Optional[bool] = None,
    ) -> Any:
        """Send a command and wait for its reply.

        Measurement commands resolve with a ReadingSet, all others with the
        decoded reply object.

        Raises:
            NotConnectedError: If the transport is not connected.
            BusyError: If another command is still outstanding.
            CommandTimeoutError: If no reply completed before the deadline.
            SoilSensorError: Any framing, parsing or calibration failure.
        """
        if not self.transport.is_connected:
            raise NotConnectedError("Device not connected")
        if self._pending is not None:
            raise BusyError(
                f"Command {self._pending.command} is still waiting for a reply"
            )

        if measurement is None:
            measurement = command in MEASUREMENT_COMMANDS

        loop = asyncio.get_running_loop()
        frame = build_command(command, payload)
        self.frame_buffer.reset()

        pending = PendingCommand(
            command=command,
            measurement=measurement,
            deadline=loop.time() + self.timeout,
            future=loop.create_future(),
        )
        pending.timer = loop.call_later(self.timeout, self._expire, pending)
        self._pending = pending

        emit(_LOGGER, self.log_sink, f"Sending command: {COMMAND_PREFIX}{command}", SEVERITY_INFO)
        _LOGGER.debug("Command frame: %r", frame)

        try:
            try:
                await self.transport.write(frame)
            except CommandWriteError as ex:
                self._resolve(pending, error=ex)
            except Exception as ex:  # pylint: disable=broad-except
                error = CommandWriteError(f"Failed to write command {command}: {ex}")
                error.__cause__ = ex
                self._resolve(pending, error=error)

            return await pending.future
        finally:
            if self._pending is pending:
                # Caller was cancelled during the write or before the reply.
                self._pending = None
                if pending.timer is not None:
                    pending.timer.cancel()
                pending.future.cancel()

    def handle_notification(self, data: bytes) -> None:
        """Feed one transport fragment through the pipeline."""
        try:
            message = self.frame_buffer.feed(data)
        except FramingError as ex:
            emit(_LOGGER, self.log_sink, f"Framing error: {ex}", SEVERITY_ERROR)
            if self._pending is not None:
                self._resolve(self._pending, error=ex)
            else:
                self.last_error = ex
            return

        if message is None:
            return

        self.last_message = message
        pending = self._pending
        if pending is None:
            emit(
                _LOGGER,
                self.log_sink,
                f"Discarding reply with no outstanding command: {message.text!r}",
                SEVERITY_WARNING,
            )
            return

        emit(_LOGGER, self.log_sink, f"Received complete reply: {message.text!r}", SEVERITY_DEBUG)
        try:
            result = self._process(pending, message)
        except SoilSensorError as ex:
            self._resolve(pending, error=ex)
            return
        self._resolve(pending, result=result)

    def handle_disconnect(self) -> None:
        """Reset framing and fail the outstanding command, if any."""
        self.frame_buffer.reset()
        if self._pending is not None:
            emit(
                _LOGGER,
                self.log_sink,
                f"Device disconnected while waiting for {self._pending.command}",
                SEVERITY_ERROR,
            )
            self._resolve(self._pending, error=DisconnectedError("Device disconnected"))

    def close(self) -> None:
        """Fail the outstanding command and drop buffered data."""
        self.handle_disconnect()

    def _process(self, pending: PendingCommand, message: RawMessage) -> Any:
        if pending.measurement:
            return self.mapper.calibrate(self.parser.parse(message))
        return self.parser.parse_document(message)

    def _expire(self, pending: PendingCommand) -> None:
        if self._pending is not pending:
            return
        self.frame_buffer.reset()
        emit(
            _LOGGER,
            self.log_sink,
            f"Command {pending.command} timed out after {self.timeout:g}s",
            SEVERITY_ERROR,
        )
        self._resolve(
            pending,
            error=CommandTimeoutError(
                f"No reply to {pending.command} within {self.timeout:g} seconds"
            ),
        )

    def _resolve(
        self,
        pending: PendingCommand,
        result: Any = None,
        error: Optional[SoilSensorError] = None,
    ) -> None:
        if self._pending is not pending:
            return
        self._pending = None
        if pending.timer is not None:
            pending.timer.cancel()
        if error is not None:
            self.last_error = error
        if pending.future.done():
            return
        if error is not None:
            pending.future.set_exception(error)
        else:
            pending.future.set_result(result)
