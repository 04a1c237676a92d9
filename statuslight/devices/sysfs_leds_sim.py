"""
Sysfs LEDs Simulator

Simulates the three brightness files in memory so effects can run without
the hardware. Keeps the current level of every channel and a timestamped
history of writes, and can be told to fail writes on chosen channels.
"""

import logging
import threading
import time
import typing as t
from dataclasses import dataclass

from statuslight.common.color import Color
from statuslight.common.enums import Channel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedWrite:
    """One recorded brightness write."""
    timestamp: float  # time.monotonic()
    channel: Channel
    value: int


class SysfsLedsSim:
    """In-memory stand-in for ``SysfsLeds``."""

    def __init__(self, echo: bool = False):
        self.levels: t.Dict[Channel, int] = {channel: 0 for channel in Channel}
        self.history: t.List[LedWrite] = []
        self.fail_channels: t.Set[Channel] = set()
        self.echo = echo
        self.closed = False
        self._lock = threading.Lock()

    def write_brightness(self, channel: Channel, value: int) -> None:
        if channel in self.fail_channels:
            raise OSError(f"[SIM] write to {channel.value} LED failed")

        with self._lock:
            self.levels[channel] = int(value)
            self.history.append(LedWrite(time.monotonic(), channel, int(value)))

        if self.echo:
            logger.info(f"[SIM] {channel.value} = {value}")

    def is_available(self) -> bool:
        return not self.closed

    def close(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    def current_color(self) -> Color:
        """Color currently shown, assembled from the three channel levels."""
        with self._lock:
            return Color(
                self.levels[Channel.RED],
                self.levels[Channel.GREEN],
                self.levels[Channel.BLUE],
            )

    def write_count(self) -> int:
        with self._lock:
            return len(self.history)

    def writes_since(self, timestamp: float) -> t.List[LedWrite]:
        """Writes recorded at or after ``timestamp`` (a monotonic time)."""
        with self._lock:
            return [w for w in self.history if w.timestamp >= timestamp]

    def last_write_time(self) -> t.Optional[float]:
        with self._lock:
            return self.history[-1].timestamp if self.history else None

    def colors_written(self) -> t.List[Color]:
        """Replay the history into the sequence of colors completed by blue writes."""
        with self._lock:
            history = list(self.history)

        levels = {channel: 0 for channel in Channel}
        colors = []
        for write in history:
            levels[write.channel] = write.value
            if write.channel == Channel.BLUE:
                colors.append(Color(levels[Channel.RED], levels[Channel.GREEN], levels[Channel.BLUE]))
        return colors

    def reset_history(self) -> None:
        with self._lock:
            self.history.clear()
