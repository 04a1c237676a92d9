"""
LED Backend Protocol

Defines the structural interface that both ``SysfsLeds`` (real brightness
files) and ``SysfsLedsSim`` (in-memory simulator) must satisfy. Uses
``typing.Protocol`` so existing classes conform without explicit inheritance.
"""

from typing import Protocol, runtime_checkable

from statuslight.common.enums import Channel


@runtime_checkable
class LedBackendProtocol(Protocol):
    """Structural protocol for LED brightness backends."""

    def write_brightness(self, channel: Channel, value: int) -> None: ...

    def is_available(self) -> bool: ...

    def close(self) -> None: ...
