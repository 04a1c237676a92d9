"""
Status Light Controller

Wires configuration, hardware backend, channel sink and effect catalog into
an EffectScheduler, and provides the command-line entry point.
"""

import argparse
import logging
import signal
import sys
import threading
import time
import typing as t
from pathlib import Path

from statuslight.common.config import ConfigManager, get_config
from statuslight.common.enums import EffectKind, get_effect_kind_enum
from statuslight.common.errors import StatusLightError
from statuslight.controller.effect_catalog import EffectCatalog, build_default_catalog
from statuslight.controller.effect_scheduler import EffectScheduler
from statuslight.devices.channel_sink import ChannelSink
from statuslight.devices.sysfs_leds import SysfsLeds
from statuslight.devices.sysfs_leds_sim import SysfsLedsSim

logger = logging.getLogger(__name__)


def build_scheduler(
    config: t.Optional[ConfigManager] = None,
    simulation: bool = False,
    catalog: t.Optional[EffectCatalog] = None,
) -> EffectScheduler:
    """Create a scheduler for the configured LED (or the simulator)."""
    config = config or get_config()

    if simulation:
        logger.info("🔧 Using simulated LED backend")
        backend = SysfsLedsSim(echo=True)
    else:
        backend = SysfsLeds.from_config(config)
        if not backend.is_available():
            logger.warning("LED brightness files not found, writes will fail until they appear")

    sink = ChannelSink(backend)
    return EffectScheduler(
        sink,
        catalog=catalog if catalog is not None else build_default_catalog(),
        grace_period=config.grace_period,
        enabled=config.enabled_on_start,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Indicator LED effect controller")
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--effect", help="Effect to run (see --list)")
    action.add_argument(
        "--color",
        nargs=3,
        type=int,
        metavar=("R", "G", "B"),
        help="Show a solid color (values are clamped to 0-255)",
    )
    action.add_argument(
        "--channel",
        choices=["red", "green", "blue"],
        help="Set a single channel (requires --value)",
    )
    action.add_argument("--off", action="store_true", help="Turn the LED off")
    action.add_argument("--list", action="store_true", help="List available effects")
    parser.add_argument("--value", type=int, help="Brightness for --channel")
    parser.add_argument(
        "--duration",
        type=float,
        help="Stop the effect after this many seconds (default: run until it ends or Ctrl+C)",
    )
    parser.add_argument(
        "--simulation",
        action="store_true",
        help="Run against an in-memory LED instead of the sysfs brightness files",
    )
    parser.add_argument("--config", type=Path, help="Path to config.json")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level",
    )
    return parser


def run_effect(scheduler: EffectScheduler, effect: str, duration: t.Optional[float] = None) -> int:
    """Run one effect in the foreground until it ends, ``duration`` passes or Ctrl+C."""
    if not scheduler.start_effect(effect):
        logger.error(f"Could not start effect '{effect}'")
        return 1

    interrupted = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda *_: interrupted.set())
    deadline = None if duration is None else time.monotonic() + duration
    try:
        while not interrupted.is_set():
            if scheduler.wait_until_idle(timeout=0.2):
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
        if scheduler.is_effect_active():
            logger.info("Stopping effect...")
            scheduler.stop_current_effect()
            scheduler.wait_until_idle(timeout=1.0)
    finally:
        signal.signal(signal.SIGINT, previous_handler)
    return 0


def main(argv: t.Optional[t.List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.channel and args.value is None:
        parser.error("--channel requires --value")

    if args.list:
        for kind in build_default_catalog().kinds():
            print(kind.value)
        return 0

    config = ConfigManager(args.config) if args.config else get_config()

    scheduler = build_scheduler(config, simulation=args.simulation)
    try:
        if args.color:
            scheduler.set_color(*args.color)
        elif args.channel:
            scheduler.set_channel(args.channel, args.value)
        elif args.off:
            scheduler.turn_off()
        else:
            effect = args.effect or config.default_effect
            if effect is None:
                parser.error("nothing to do: give --effect, --color, --channel or --off")
            if get_effect_kind_enum(effect) is None:
                parser.error(f"unknown effect '{effect}', choose from: {', '.join(k.value for k in EffectKind)}")
            return run_effect(scheduler, effect, args.duration)
    except StatusLightError as e:
        logger.error(str(e))
        return 1
    finally:
        if scheduler.is_effect_active():
            scheduler.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
