"""
Sysfs LEDs

Writes brightness values to the kernel LED class files, one overwrite-on-write
text file per channel (``/sys/class/leds/<name>/brightness``).
"""

import logging
import typing as t
from pathlib import Path

from statuslight.common.enums import Channel

if t.TYPE_CHECKING:
    from statuslight.common.config import ConfigManager

logger = logging.getLogger(__name__)


class SysfsLeds:
    """Brightness backend backed by sysfs files."""

    def __init__(self, paths: t.Mapping[Channel, t.Union[str, Path]]):
        missing = [channel.value for channel in Channel if channel not in paths]
        if missing:
            raise ValueError(f"No brightness file configured for: {', '.join(missing)}")
        self.paths: t.Dict[Channel, Path] = {
            channel: Path(paths[channel]) for channel in Channel
        }

    @classmethod
    def from_config(cls, config: "ConfigManager") -> "SysfsLeds":
        return cls(config.get_led_paths())

    def write_brightness(self, channel: Channel, value: int) -> None:
        """Write one value. ``OSError`` propagates to the caller."""
        with open(self.paths[channel], "w", encoding="ascii") as f:
            f.write(str(int(value)))

    def read_brightness(self, channel: Channel) -> t.Optional[int]:
        """Read back the current value, or None if it can't be read."""
        try:
            return int(self.paths[channel].read_text(encoding="ascii").strip())
        except (OSError, ValueError) as e:
            logger.debug(f"Could not read {channel.value} brightness: {e}")
            return None

    def is_available(self) -> bool:
        """True if every channel's brightness file exists."""
        return all(path.exists() for path in self.paths.values())

    def close(self) -> None:
        # Files are opened per write, nothing to release
        pass
