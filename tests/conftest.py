"""Pytest configuration and shared fixtures"""
import pytest
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from statuslight.common.color import BLUE, GREEN, RED, Color  # noqa: E402
from statuslight.common.enums import EffectKind  # noqa: E402
from statuslight.controller.effect_catalog import EffectCatalog, blinking, pulsing, timeline, Solid  # noqa: E402
from statuslight.controller.effect_scheduler import EffectScheduler  # noqa: E402
from statuslight.devices.channel_sink import ChannelSink  # noqa: E402
from statuslight.devices.sysfs_leds_sim import SysfsLedsSim  # noqa: E402


def wait_for(predicate, timeout=1.0, interval=0.005):
    """Poll ``predicate`` until it is truthy or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture(name="wait_for")
def wait_for_fixture():
    """Polling helper for timing assertions"""
    return wait_for


@pytest.fixture(scope="session")
def project_root_path():
    """Get the project root path"""
    return Path(__file__).parent.parent


@pytest.fixture
def sim():
    """In-memory LED backend"""
    backend = SysfsLedsSim()
    yield backend
    backend.close()


@pytest.fixture
def sink(sim):
    """Channel sink writing to the simulator"""
    return ChannelSink(sim)


@pytest.fixture
def fast_catalog():
    """Small catalog with short, predictable effects"""
    catalog = EffectCatalog()
    catalog.register(EffectKind.NOTIFICATION, pulsing(GREEN, 0.4))
    catalog.register(EffectKind.CALL_NOTIFICATION, blinking(RED, 0, 0.05, 0.05))
    catalog.register(EffectKind.BLUETOOTH_CONNECTING, blinking(BLUE, 0, 0.05, 0.05))
    catalog.register(EffectKind.BLUETOOTH_FAILED, blinking(RED, 3, 0.05, 0.05))
    catalog.register(EffectKind.CAMERA_FOCUS, timeline((Solid(Color(255, 128, 0), 0.1),)))
    return catalog


@pytest.fixture
def scheduler(sink, fast_catalog):
    """Scheduler over the simulator with the fast catalog"""
    sched = EffectScheduler(sink, catalog=fast_catalog, grace_period=0.5)
    yield sched
    sched.shutdown()


@pytest.fixture
def default_scheduler(sink):
    """Scheduler over the simulator with the built-in effect catalog"""
    sched = EffectScheduler(sink)
    yield sched
    sched.shutdown()
