import typing as t
from enum import Enum


class Channel(str, Enum):
    """Brightness channels of the indicator LED, in write order."""
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class EffectKind(str, Enum):
    """Named effects the scheduler can run."""

    BOOTUP = "bootup"
    NOTIFICATION = "notification"
    CALL_NOTIFICATION = "call_notification"
    MUSIC = "music"
    PARTY = "party"
    BLUETOOTH_CONNECTING = "bluetooth_connecting"
    BLUETOOTH_CONNECTED = "bluetooth_connected"
    BLUETOOTH_FAILED = "bluetooth_failed"
    WIFI_CONNECTING = "wifi_connecting"
    WIFI_CONNECTED = "wifi_connected"
    WIFI_FAILED = "wifi_failed"
    CHARGING_LOW_BATTERY = "charging_low_battery"
    CHARGING_HIGH_BATTERY = "charging_high_battery"
    CAMERA_FOCUS = "camera_focus"
    CAMERA_CAPTURE = "camera_capture"
    CAMERA_SAVE_PHOTO = "camera_save_photo"


def get_effect_kind_enum(effect_kind: t.Union["EffectKind", str]) -> t.Optional["EffectKind"]:
    """Convert an effect name to EffectKind.

    Accepts the enum itself, its value ("wifi_failed") or its member name
    ("WIFI_FAILED"). Returns None for anything unrecognized.
    """
    if isinstance(effect_kind, EffectKind):
        return effect_kind
    if not isinstance(effect_kind, str):
        return None
    name = effect_kind.strip().lower().replace("-", "_")
    try:
        return EffectKind(name)
    except ValueError:
        return None


class SchedulerState(str, Enum):
    """Scheduler states."""

    IDLE = "idle"
    RUNNING = "running"
