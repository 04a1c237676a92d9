"""Test the timed primitives"""
import threading
import time

import pytest
from statuslight.common.color import GREEN, OFF, RED, Color
from statuslight.common.enums import Channel
from statuslight.common.constants import MAX_STEP_INTERVAL, MIN_FADE_STEPS
from statuslight.controller.primitives import (
    CancellationToken,
    blink,
    fade,
    fade_frames,
    fade_step_plan,
    hold,
    pulse,
    sleep_cancellable,
)


CANCEL_LATENCY = 0.06  # wait slice plus the off write, with scheduling slack


def canceled_token():
    token = CancellationToken()
    token.cancel()
    return token


def measure_cancel_latency(sim, routine, run_for=0.15):
    """Run ``routine(token)`` on a thread, cancel it, return seconds until its last write."""
    token = CancellationToken()
    thread = threading.Thread(target=routine, args=(token,))
    thread.start()
    time.sleep(run_for)

    canceled_at = time.monotonic()
    token.cancel()
    thread.join(1.0)

    assert not thread.is_alive()
    assert sim.current_color() == OFF
    return sim.last_write_time() - canceled_at


# ----------------------------------------------------------------------
# CancellationToken
# ----------------------------------------------------------------------

def test_token_is_single_use():
    """Only the first cancel reports the transition"""
    token = CancellationToken()
    assert not token.canceled
    assert token.cancel() is True
    assert token.cancel() is False
    assert token.canceled
    assert token.wait(0) is True


def test_token_generations_increase():
    """Each token gets a new generation number"""
    first, second = CancellationToken(), CancellationToken()
    assert second.generation > first.generation
    assert "live" in repr(first)


def test_sleep_cancellable_full_duration():
    """Uncanceled sleep waits the whole duration"""
    started = time.monotonic()
    assert sleep_cancellable(0.05, CancellationToken()) is True
    assert time.monotonic() - started >= 0.05


def test_sleep_cancellable_wakes_on_cancel():
    """Canceling from another thread ends the sleep promptly"""
    token = CancellationToken()
    threading.Timer(0.05, token.cancel).start()

    started = time.monotonic()
    assert sleep_cancellable(5.0, token) is False
    assert time.monotonic() - started < 1.0


# ----------------------------------------------------------------------
# Fade
# ----------------------------------------------------------------------

@pytest.mark.parametrize("duration", [0.0, 0.1, 0.5, 1.0, 2.0, 3.3, 10.0])
def test_fade_step_plan_bounds(duration):
    """Steps never exceed the maximum interval and never drop below the minimum count"""
    steps, step_duration = fade_step_plan(duration)
    assert steps >= MIN_FADE_STEPS
    assert step_duration <= MAX_STEP_INTERVAL + 1e-9
    assert steps * step_duration == pytest.approx(duration)


def test_fade_step_plan_default_and_long():
    """Short fades use 50 steps, long fades get more"""
    assert fade_step_plan(0.5) == (50, pytest.approx(0.01))
    assert fade_step_plan(2.0) == (100, pytest.approx(0.02))


def test_fade_frames_truncate():
    """Frames interpolate linearly and truncate toward zero"""
    frames = fade_frames(OFF, RED, 50)
    assert frames.shape == (51, 3)
    assert tuple(frames[0]) == (0, 0, 0)
    assert tuple(frames[1]) == (5, 0, 0)
    assert tuple(frames[-1]) == (255, 0, 0)

    down = fade_frames(RED, OFF, 50)
    assert tuple(down[1]) == (249, 0, 0)
    assert tuple(down[-1]) == (0, 0, 0)


def test_fade_reaches_end_color(sim, sink):
    """A completed fade leaves the end color lit"""
    assert fade(sink, OFF, GREEN, 0.1, CancellationToken()) is True
    assert sim.current_color() == GREEN
    colors = sim.colors_written()
    assert len(colors) == 51
    assert colors[0] == OFF


def test_fade_cancel_latency(sim, sink):
    """A canceled fade stops within a few wait slices and goes dark"""
    token = CancellationToken()
    result = {}

    def run():
        result["completed"] = fade(sink, OFF, RED, 2.0, token)

    thread = threading.Thread(target=run)
    thread.start()
    time.sleep(0.1)

    canceled_at = time.monotonic()
    token.cancel()
    thread.join(1.0)

    assert not thread.is_alive()
    assert result["completed"] is False
    assert sim.current_color() == OFF
    assert sim.last_write_time() - canceled_at < CANCEL_LATENCY


def test_fade_with_canceled_token(sim, sink):
    """Pre-canceled token: no frames, just off"""
    assert fade(sink, OFF, RED, 1.0, canceled_token()) is False
    assert sim.colors_written() == [OFF]


def test_fade_continues_on_hardware_failure(sim, sink):
    """Write failures are logged, the fade carries on"""
    sim.fail_channels.add(Channel.GREEN)
    assert fade(sink, OFF, RED, 0.05, CancellationToken()) is True
    assert sim.levels[Channel.RED] == 255


# ----------------------------------------------------------------------
# Pulse / Blink / Hold
# ----------------------------------------------------------------------

def test_pulse_counted_cycles(sim, sink):
    """Each cycle is a fade up and a fade down"""
    assert pulse(sink, RED, 2, 0.1, CancellationToken()) is True
    colors = sim.colors_written()
    assert len(colors) == 2 * 2 * 51
    assert colors.count(RED) == 4
    assert sim.current_color() == OFF


def test_pulse_unbounded_until_canceled(sim, sink):
    """cycles=0 keeps pulsing until the token is canceled"""
    token = CancellationToken()
    threading.Timer(0.5, token.cancel).start()
    assert pulse(sink, GREEN, 0, 0.1, token) is False
    assert sim.colors_written().count(GREEN) >= 1
    assert sim.current_color() == OFF


def test_blink_count(sim, sink):
    """Blink writes color then off, count times"""
    assert blink(sink, RED, 2, 0.01, 0.01, CancellationToken()) is True
    assert sim.colors_written() == [RED, OFF, RED, OFF]


def test_pulse_cancel_latency(sim, sink):
    """A canceled pulse goes dark within the latency bound"""
    latency = measure_cancel_latency(sim, lambda token: pulse(sink, GREEN, 0, 2.0, token))
    assert latency < CANCEL_LATENCY


def test_blink_cancel_latency(sim, sink):
    """A canceled blink goes dark within the latency bound, even mid on-phase"""
    latency = measure_cancel_latency(sim, lambda token: blink(sink, RED, 0, 1.0, 1.0, token))
    assert latency < CANCEL_LATENCY


def test_blink_with_canceled_token(sim, sink):
    """Pre-canceled blink only turns the LED off"""
    assert blink(sink, RED, 3, 0.1, 0.1, canceled_token()) is False
    assert sim.colors_written() == [OFF]


def test_hold_leaves_color(sim, sink):
    """Hold keeps the color lit when it completes"""
    color = Color(10, 20, 30)
    assert hold(sink, color, 0.02, CancellationToken()) is True
    assert sim.current_color() == color


def test_closed_gate_suppresses_primitive_output(sim, sink):
    """Primitives keep timing while the gate is closed but nothing is written"""
    sink.gate.clear()
    assert blink(sink, RED, 1, 0.01, 0.01, CancellationToken()) is True
    assert sim.write_count() == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
