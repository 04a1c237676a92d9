"""
Error Taxonomy

Nothing here is fatal: every failure degrades to "the LED shows nothing or a
stale color" rather than stopping the process.
"""

import typing as t


class StatusLightError(Exception):
    """Base class for all statuslight errors."""


class InvalidColorValue(StatusLightError, ValueError):
    """A channel value that cannot be written (not an integer)."""

    def __init__(self, value: t.Any, channel: t.Optional[str] = None):
        self.value = value
        self.channel = channel
        where = f" for {channel}" if channel else ""
        super().__init__(f"Invalid brightness value{where}: {value!r}")


class InvalidChannel(StatusLightError, ValueError):
    """Unknown channel name."""

    def __init__(self, channel: t.Any):
        self.channel = channel
        super().__init__(f"Unknown channel: {channel!r}")


class HardwareWriteFailure(StatusLightError):
    """Writing a brightness value to the hardware failed."""

    def __init__(self, channel: str, value: int, cause: BaseException):
        self.channel = channel
        self.value = value
        self.cause = cause
        super().__init__(f"Failed to write {value} to {channel} LED: {cause}")
