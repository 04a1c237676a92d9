"""
Effect Catalog

Named effects composed from the timed primitives. The scheduler only needs
one capability per kind: ``body(sink, token)``. Every registered body is
wrapped so the LED is turned off on every exit path (completion,
cancellation or an exception).
"""

import functools
import itertools
import logging
import time
import typing as t
from dataclasses import dataclass

import numpy as np

from statuslight.common.color import BLUE, CYAN, GREEN, OFF, ORANGE, RED, WHITE, Color
from statuslight.common.enums import EffectKind, get_effect_kind_enum
from statuslight.controller.primitives import (
    CancellationToken,
    blink,
    fade,
    hold,
    pulse,
    write_off,
)
from statuslight.devices.channel_sink import ChannelSink

logger = logging.getLogger(__name__)

EffectBody = t.Callable[[ChannelSink, CancellationToken], None]


@dataclass(frozen=True)
class Solid:
    """Keyframe: show one color for a duration."""
    color: Color
    duration: float


@dataclass(frozen=True)
class Ramp:
    """Keyframe: fade between two colors over a duration."""
    start: Color
    end: Color
    duration: float


Keyframe = t.Union[Solid, Ramp]


def play_timeline(sink: ChannelSink, token: CancellationToken, timeline: t.Sequence[Keyframe]) -> bool:
    """Play keyframes in order. Returns False as soon as the token is canceled."""
    for keyframe in timeline:
        if isinstance(keyframe, Ramp):
            completed = fade(sink, keyframe.start, keyframe.end, keyframe.duration, token)
        else:
            completed = hold(sink, keyframe.color, keyframe.duration, token)
        if not completed:
            return False
    return True


def ends_dark(body: EffectBody) -> EffectBody:
    """Wrap an effect body so it always finishes by turning the LED off."""
    @functools.wraps(body)
    def run(sink: ChannelSink, token: CancellationToken) -> None:
        try:
            body(sink, token)
        finally:
            write_off(sink)
    return run


class EffectCatalog:
    """Registry mapping EffectKind to effect bodies."""

    def __init__(self):
        self._bodies: t.Dict[EffectKind, EffectBody] = {}

    def register(self, kind: t.Union[EffectKind, str], body: EffectBody) -> None:
        """Register (or replace) the body for an effect kind."""
        effect_kind = get_effect_kind_enum(kind)
        if effect_kind is None:
            raise ValueError(f"Unknown effect kind: {kind!r}")
        if effect_kind in self._bodies:
            logger.debug(f"Replacing effect body for {effect_kind.value}")
        self._bodies[effect_kind] = ends_dark(body)

    def get(self, kind: t.Union[EffectKind, str]) -> t.Optional[EffectBody]:
        effect_kind = get_effect_kind_enum(kind)
        if effect_kind is None:
            return None
        return self._bodies.get(effect_kind)

    def kinds(self) -> t.List[EffectKind]:
        return list(self._bodies)

    def __contains__(self, kind: object) -> bool:
        return self.get(kind) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._bodies)


# ============================================================================
# EFFECT FACTORIES
# ============================================================================

def pulsing(color: Color, cycle_duration: float, cycles: int = 0) -> EffectBody:
    def body(sink: ChannelSink, token: CancellationToken) -> None:
        pulse(sink, color, cycles, cycle_duration, token)
    return body


def blinking(color: Color, count: int, on_duration: float, off_duration: float) -> EffectBody:
    def body(sink: ChannelSink, token: CancellationToken) -> None:
        blink(sink, color, count, on_duration, off_duration, token)
    return body


def timeline(keyframes: t.Sequence[Keyframe], loop: bool = False) -> EffectBody:
    """Body playing ``keyframes`` once, or repeatedly until canceled if ``loop``."""
    if not keyframes:
        raise ValueError("A timeline needs at least one keyframe")

    def body(sink: ChannelSink, token: CancellationToken) -> None:
        while play_timeline(sink, token, keyframes) and loop and not token.canceled:
            pass
    return body


# ============================================================================
# EFFECT DATA
# ============================================================================

BOOTUP_TIMELINE: t.Tuple[Keyframe, ...] = (
    Solid(RED, 1.0), Solid(OFF, 0.2),
    Solid(GREEN, 1.0), Solid(OFF, 0.2),
    Solid(BLUE, 1.0), Solid(OFF, 0.2),
)

CAMERA_CAPTURE_TIMELINE: t.Tuple[Keyframe, ...] = (
    Solid(WHITE, 1.0),
    Solid(OFF, 0.5),
    Solid(WHITE, 0.2),
)

MAGENTA = Color(255, 0, 255)
YELLOW = Color(255, 255, 0)

# Ten seconds, looped
MUSIC_TIMELINE: t.Tuple[Keyframe, ...] = (
    # 0-1s: blue beats over green
    Solid(CYAN, 0.2), Solid(GREEN, 0.2), Solid(CYAN, 0.1),
    Solid(BLUE, 0.1), Solid(OFF, 0.2), Solid(BLUE, 0.2),
    # 1-2s: red rises under blue, then blue falls away
    Ramp(BLUE, MAGENTA, 0.5), Ramp(MAGENTA, RED, 0.5),
    # 2-3s
    Solid(BLUE, 0.2), Solid(OFF, 0.2), Solid(BLUE, 0.2), Solid(OFF, 0.2), Solid(BLUE, 0.2),
    # 3-4s: red and green rise together, red falls away
    Ramp(OFF, YELLOW, 0.5), Ramp(YELLOW, GREEN, 0.5),
    # 4-5s
    Solid(RED, 0.3), Solid(OFF, 0.1), Solid(BLUE, 0.2),
    Solid(OFF, 0.2), Solid(BLUE, 0.1), Solid(OFF, 0.1),
    # 5-6s
    Solid(BLUE, 0.2), Solid(GREEN, 0.2), Solid(BLUE, 0.2), Solid(GREEN, 0.2), Solid(BLUE, 0.2),
    # 6-7s
    Ramp(BLUE, Color(0, 0, 80), 0.5), Ramp(Color(0, 0, 80), BLUE, 0.5),
    # 7-8s
    Ramp(Color(0, 80, 0), GREEN, 0.5), Ramp(GREEN, Color(0, 80, 0), 0.5),
    # 8-9s
    Ramp(Color(80, 0, 0), RED, 0.7), Solid(RED, 0.3),
    # 9-10s
    Solid(GREEN, 0.5), Solid(BLUE, 0.5),
)

PARTY_DURATION = 9.0
PARTY_RED_ACCENT_INTERVAL = 3.0

# Blue -> purple -> green -> yellow in half a second
PARTY_RAINBOW: t.Tuple[Keyframe, ...] = (
    Ramp(BLUE, MAGENTA, 0.165),
    Ramp(MAGENTA, GREEN, 0.165),
    Ramp(GREEN, YELLOW, 0.17),
)


def call_notification(sink: ChannelSink, token: CancellationToken) -> None:
    """Red and blue alternating, 200ms on / 200ms off, until stopped."""
    for color in itertools.cycle((RED, BLUE)):
        if not blink(sink, color, 1, 0.2, 0.2, token):
            return


def party(sink: ChannelSink, token: CancellationToken, rng: t.Optional[np.random.Generator] = None) -> None:
    """
    Nine-second light show.

    Seconds 1-4: blue and green flicker with a red accent every 3s.
    Second 5: rainbow sweep, then flicker with a single red dot.
    Seconds 6-8: steady blue/green flicker.
    Second 9: fast blue/green alternation with random intensity.
    """
    rng = rng or np.random.default_rng()
    started = time.monotonic()
    red_due = started + PARTY_RED_ACCENT_INTERVAL

    def flash(color: Color, on_duration: float, off_duration: float) -> bool:
        return blink(sink, color, 1, on_duration, off_duration, token)

    def level(low: int, high: int) -> int:
        return int(rng.integers(low, high + 1))

    while not token.canceled:
        elapsed = time.monotonic() - started
        if elapsed >= PARTY_DURATION:
            return
        second = int(elapsed) + 1

        if second <= 4:
            if time.monotonic() >= red_due:
                if not flash(RED, 0.3, 0.0):
                    return
                red_due = time.monotonic() + PARTY_RED_ACCENT_INTERVAL
            if not flash(Color(0, 0, level(150, 200)), 0.2, 0.05):
                return
            if second == 1:
                green = int(100 + 155 * (elapsed % 1.0))
            else:
                green = level(150, 200)
            if not flash(Color(0, green, 0), 0.2, 0.1):
                return

        elif second == 5:
            if not play_timeline(sink, token, PARTY_RAINBOW):
                return
            for i in range(3):
                if not flash(Color(0, 0, 200), 0.2, 0.05):
                    return
                if not flash(Color(0, 200, 0), 0.2, 0.1):
                    return
                if i == 1 and not flash(RED, 0.1, 0.0):
                    return

        elif second <= 8:
            if not flash(Color(0, 0, 200), 0.2, 0.05):
                return
            if not flash(Color(0, 200, 0), 0.2, 0.1):
                return

        else:
            for _ in range(5):
                if not flash(Color(0, 0, level(150, 250)), 0.1, 0.0):
                    return
                if not flash(Color(0, level(150, 250), 0), 0.15, 0.0):
                    return


def build_default_catalog() -> EffectCatalog:
    """Catalog with every built-in effect registered."""
    catalog = EffectCatalog()

    catalog.register(EffectKind.BOOTUP, timeline(BOOTUP_TIMELINE))
    catalog.register(EffectKind.NOTIFICATION, pulsing(GREEN, 2.0))
    catalog.register(EffectKind.CALL_NOTIFICATION, call_notification)
    catalog.register(EffectKind.MUSIC, timeline(MUSIC_TIMELINE, loop=True))
    catalog.register(EffectKind.PARTY, party)

    catalog.register(EffectKind.BLUETOOTH_CONNECTING, blinking(BLUE, 0, 0.3, 0.5))
    catalog.register(EffectKind.BLUETOOTH_CONNECTED, timeline((Solid(BLUE, 3.0),)))
    catalog.register(EffectKind.BLUETOOTH_FAILED, blinking(RED, 3, 0.2, 0.4))

    catalog.register(EffectKind.WIFI_CONNECTING, pulsing(GREEN, 2.5))
    catalog.register(EffectKind.WIFI_CONNECTED, timeline((Solid(GREEN, 3.0),)))
    catalog.register(EffectKind.WIFI_FAILED, blinking(RED, 3, 0.3, 0.3))

    catalog.register(EffectKind.CHARGING_LOW_BATTERY, pulsing(RED, 2.0))
    catalog.register(EffectKind.CHARGING_HIGH_BATTERY, pulsing(GREEN, 2.0))

    catalog.register(EffectKind.CAMERA_FOCUS, timeline((Solid(ORANGE, 2.0),)))
    catalog.register(EffectKind.CAMERA_CAPTURE, timeline(CAMERA_CAPTURE_TIMELINE))
    catalog.register(EffectKind.CAMERA_SAVE_PHOTO, timeline((Solid(GREEN, 1.0),)))

    return catalog


# Static, non-animated state shown with EffectScheduler.show_static
CHARGING_COMPLETE_COLOR = BLUE
