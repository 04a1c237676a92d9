"""
Status Light

Runs timed effects on a three-channel indicator LED, one effect at a time,
with cooperative cancellation and a master enable that mutes output.
"""

from statuslight.common.color import Color
from statuslight.common.enums import Channel, EffectKind
from statuslight.controller.effect_scheduler import EffectScheduler
from statuslight.controller.main import build_scheduler

__all__ = ["Channel", "Color", "EffectKind", "EffectScheduler", "build_scheduler"]
