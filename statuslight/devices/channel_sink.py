"""
Channel Sink

Validates, clamps and writes single-channel brightness values, subject to the
master enable gate. Composing a Color writes red, green and blue in that order.
"""

import logging
import threading
import typing as t

from statuslight.common.color import OFF, Color, validate_brightness
from statuslight.common.enums import Channel
from statuslight.common.errors import HardwareWriteFailure, InvalidChannel
from statuslight.devices.led_backend_protocol import LedBackendProtocol

logger = logging.getLogger(__name__)


def get_channel_enum(channel: t.Union[Channel, str]) -> Channel:
    """Convert a channel name ("red", "GREEN", ...) to Channel."""
    if isinstance(channel, Channel):
        return channel
    try:
        return Channel(str(channel).strip().lower())
    except ValueError:
        raise InvalidChannel(channel) from None


class ChannelSink:
    """
    Single entry point for hardware writes.

    The enable gate is a ``threading.Event`` shared with the scheduler: while
    it is clear every write is a silent no-op unless forced. Gate check and
    backend write happen under one write lock, so once the gate is cleared
    and a forced write has gone through, no earlier write can land after it.
    """

    def __init__(
        self,
        backend: LedBackendProtocol,
        gate: t.Optional[threading.Event] = None,
    ):
        self.backend = backend
        if gate is None:
            gate = threading.Event()
            gate.set()
        self.gate = gate
        self._write_lock = threading.Lock()

    def is_open(self) -> bool:
        """True if writes currently reach the hardware."""
        return self.gate.is_set()

    def write(self, channel: t.Union[Channel, str], value: int, force: bool = False) -> bool:
        """
        Write one channel.

        Args:
            channel: Channel or channel name
            value: Brightness, clamped to [0, 255]
            force: Write even while the gate is closed

        Returns:
            True if the value reached the backend, False if the gate suppressed it

        Raises:
            InvalidChannel: unknown channel name
            InvalidColorValue: value is not an integer
            HardwareWriteFailure: the backend write failed
        """
        channel = get_channel_enum(channel)
        value = validate_brightness(value, channel.value)

        with self._write_lock:
            if not force and not self.gate.is_set():
                return False
            try:
                self.backend.write_brightness(channel, value)
            except OSError as e:
                logger.warning(f"Failed to write {value} to {channel.value} LED: {e}")
                raise HardwareWriteFailure(channel.value, value, e) from e
        return True

    def set_color(self, color: Color, force: bool = False) -> bool:
        """
        Write red, green, blue in order.

        A hardware failure on one channel doesn't skip the others; the first
        failure is raised once all three were attempted.
        """
        first_failure: t.Optional[HardwareWriteFailure] = None
        written = False
        for channel, value in zip(Channel, color.as_tuple()):
            try:
                written = self.write(channel, value, force=force) or written
            except HardwareWriteFailure as e:
                if first_failure is None:
                    first_failure = e
        if first_failure is not None:
            raise first_failure
        return written

    def off(self, force: bool = False) -> bool:
        """Turn all channels off."""
        return self.set_color(OFF, force=force)
