"""
Timed Primitives

Cancellable building blocks for effects: fade, pulse, blink, hold and the
sliced wait they are built on. Every routine checks its CancellationToken at
each wait point and, once canceled, writes "off" and returns False. A routine
that runs to completion returns True.

Cancellation latency is bounded by WAIT_SLICE: no wait ever blocks longer
than that without looking at the token, and no fade step (write + wait) is
longer than MAX_STEP_INTERVAL.
"""

import itertools
import logging
import math
import threading
import time
import typing as t

import numpy as np

from statuslight.common.color import OFF, Color
from statuslight.common.constants import (
    DEFAULT_FADE_STEPS,
    MAX_STEP_INTERVAL,
    MIN_FADE_STEPS,
    WAIT_SLICE,
)
from statuslight.common.errors import HardwareWriteFailure
from statuslight.devices.channel_sink import ChannelSink

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Single-use cancellation signal owned by one effect execution.

    Goes from live to canceled exactly once and is never reset.
    """

    _generations = itertools.count(1)

    def __init__(self):
        self.generation = next(self._generations)
        self._event = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> bool:
        """Cancel the token. Returns True only for the call that canceled it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
        logger.debug(f"Token #{self.generation} canceled")
        return True

    @property
    def canceled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: t.Optional[float] = None) -> bool:
        """Block until canceled or ``timeout`` elapses. Returns ``canceled``."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "canceled" if self.canceled else "live"
        return f"<CancellationToken #{self.generation} {state}>"


# ----------------------------------------------------------------------
# Low-level helpers
# ----------------------------------------------------------------------

def write_color(sink: ChannelSink, color: Color) -> None:
    """Write a color, logging (not raising) hardware failures."""
    try:
        sink.set_color(color)
    except HardwareWriteFailure as e:
        logger.warning(f"Continuing after hardware write failure: {e}")


def write_off(sink: ChannelSink) -> None:
    """Best-effort "off" write."""
    write_color(sink, OFF)


def sleep_cancellable(duration: float, token: CancellationToken) -> bool:
    """
    Wait ``duration`` seconds in slices of at most WAIT_SLICE.

    Returns:
        True if the full duration elapsed, False as soon as the token is canceled
    """
    deadline = time.monotonic() + max(0.0, duration)
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return not token.canceled
        if token.wait(min(remaining, WAIT_SLICE)):
            return False


def _abort(sink: ChannelSink, where: str) -> bool:
    logger.debug(f"{where}: canceled, turning LED off")
    write_off(sink)
    return False


# ----------------------------------------------------------------------
# Fade
# ----------------------------------------------------------------------

def fade_step_plan(duration: float) -> t.Tuple[int, float]:
    """
    Choose the step count and per-step duration for a fade.

    Starts from DEFAULT_FADE_STEPS; if that makes a step longer than
    MAX_STEP_INTERVAL the count grows to keep every step within it, but
    never drops below MIN_FADE_STEPS.
    """
    duration = max(0.0, duration)
    steps = DEFAULT_FADE_STEPS
    step_duration = duration / steps
    if step_duration > MAX_STEP_INTERVAL:
        steps = max(MIN_FADE_STEPS, math.floor(duration / MAX_STEP_INTERVAL + 1e-9))
        step_duration = duration / steps
    return steps, step_duration


def fade_frames(start: Color, end: Color, steps: int) -> np.ndarray:
    """
    Interpolated colors for steps 0..steps, shape (steps + 1, 3).

    Values are truncated toward zero, so the last frame is exactly ``end``.
    """
    origin = np.asarray(start.clamped().as_tuple(), dtype=float)
    delta = np.asarray(end.clamped().as_tuple(), dtype=float) - origin
    progress = np.arange(steps + 1) / steps
    return (origin + np.outer(progress, delta)).astype(int)


def fade(
    sink: ChannelSink,
    start: Color,
    end: Color,
    duration: float,
    token: CancellationToken,
) -> bool:
    """Linear transition from ``start`` to ``end`` over ``duration`` seconds."""
    steps, step_duration = fade_step_plan(duration)
    logger.debug(f"Fade {start} -> {end} over {duration:.3f}s ({steps} steps of {step_duration * 1000:.1f}ms)")

    for frame in fade_frames(start, end, steps):
        if token.canceled:
            return _abort(sink, "Fade")

        try:
            sink.set_color(Color(*(int(v) for v in frame)))
        except HardwareWriteFailure as e:
            logger.warning(f"Fade: continuing after hardware write failure: {e}")

        if not sleep_cancellable(step_duration, token):
            return _abort(sink, "Fade")

    return True


# ----------------------------------------------------------------------
# Pulse / Blink / Hold
# ----------------------------------------------------------------------

def pulse(
    sink: ChannelSink,
    color: Color,
    cycles: int,
    cycle_duration: float,
    token: CancellationToken,
) -> bool:
    """
    Breathing effect: fade up from off to ``color`` and back down.

    Args:
        cycles: Number of up/down cycles, 0 repeats until canceled
        cycle_duration: Seconds per cycle, split evenly between the two fades
    """
    half = cycle_duration / 2
    for cycle in itertools.count():
        if cycles and cycle >= cycles:
            break
        if token.canceled:
            return _abort(sink, "Pulse")

        if not fade(sink, OFF, color, half, token):
            return False

        if token.canceled:
            return _abort(sink, "Pulse")

        if not fade(sink, color, OFF, half, token):
            return False

    return True


def blink(
    sink: ChannelSink,
    color: Color,
    count: int,
    on_duration: float,
    off_duration: float,
    token: CancellationToken,
) -> bool:
    """On/off flashing, ``count`` times (0 repeats until canceled)."""
    for flash in itertools.count():
        if count and flash >= count:
            break
        if token.canceled:
            return _abort(sink, "Blink")

        write_color(sink, color)
        if not sleep_cancellable(on_duration, token):
            return _abort(sink, "Blink")

        write_off(sink)
        if not sleep_cancellable(off_duration, token):
            return _abort(sink, "Blink")

    return True


def hold(
    sink: ChannelSink,
    color: Color,
    duration: float,
    token: CancellationToken,
) -> bool:
    """Show a solid color for ``duration`` seconds. Leaves it lit on completion."""
    if token.canceled:
        return _abort(sink, "Hold")

    write_color(sink, color)
    if not sleep_cancellable(duration, token):
        return _abort(sink, "Hold")
    return True
