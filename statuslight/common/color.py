"""
Color

Immutable RGB value type plus the palette used by the effect catalog.
"""

import numbers
import typing as t
from dataclasses import dataclass

from statuslight.common.constants import BRIGHTNESS_MAX, BRIGHTNESS_MIN
from statuslight.common.errors import InvalidColorValue


def clamp_brightness(value: int) -> int:
    """Clamp a brightness value into [0, 255]."""
    return max(BRIGHTNESS_MIN, min(BRIGHTNESS_MAX, int(value)))


def validate_brightness(value: t.Any, channel: t.Optional[str] = None) -> int:
    """Return ``value`` clamped to [0, 255].

    Raises:
        InvalidColorValue: if ``value`` is not an integer (bools are rejected too)
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidColorValue(value, channel)
    return clamp_brightness(value)


@dataclass(frozen=True)
class Color:
    """Red, green and blue intensities. Clamped to [0, 255] when written."""

    red: int
    green: int
    blue: int

    def __post_init__(self):
        validate_brightness(self.red, "red")
        validate_brightness(self.green, "green")
        validate_brightness(self.blue, "blue")

    @classmethod
    def from_hex(cls, hex_color: str) -> "Color":
        """Build a color from ``#rrggbb`` (hash optional, case-insensitive)."""
        digits = hex_color.lstrip("#")
        if len(digits) != 6:
            raise InvalidColorValue(hex_color)
        try:
            return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
        except ValueError:
            raise InvalidColorValue(hex_color) from None

    def clamped(self) -> "Color":
        """Return the color with every channel clamped into range."""
        return Color(
            clamp_brightness(self.red),
            clamp_brightness(self.green),
            clamp_brightness(self.blue),
        )

    def as_tuple(self) -> t.Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def is_off(self) -> bool:
        return self.clamped() == OFF

    def __str__(self) -> str:
        return f"({self.red}, {self.green}, {self.blue})"


OFF = Color(0, 0, 0)
RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
WHITE = Color(255, 255, 255)
ORANGE = Color(255, 128, 0)
CYAN = Color(0, 255, 255)
