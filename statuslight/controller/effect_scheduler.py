"""
Effect Scheduler

Owns the single "currently running effect" slot. Starting an effect cancels
the one on record, gives it a short advisory grace window to exit, then
launches the new body on its own thread with a fresh CancellationToken.

A master enable gate mutes hardware output without touching the logical
effect state: disabling forces an immediate "off" write, the running effect
keeps going and becomes visible again from its next write once re-enabled.

The state lock guards only state transitions. It is never held across I/O,
sleeps or thread joins.
"""

import logging
import threading
import time
import typing as t
from dataclasses import dataclass, field

from statuslight.common.color import Color
from statuslight.common.constants import DEFAULT_GRACE_PERIOD
from statuslight.common.enums import Channel, EffectKind, SchedulerState, get_effect_kind_enum
from statuslight.common.errors import HardwareWriteFailure
from statuslight.controller.effect_catalog import EffectBody, EffectCatalog, build_default_catalog
from statuslight.controller.primitives import CancellationToken, write_off
from statuslight.devices.channel_sink import ChannelSink

logger = logging.getLogger(__name__)


@dataclass
class EffectHandle:
    """One effect execution: its kind, token and worker thread."""
    kind: EffectKind
    token: CancellationToken
    thread: t.Optional[threading.Thread] = None
    finished: threading.Event = field(default_factory=threading.Event)
    started_at: float = field(default_factory=time.monotonic)

    @property
    def alive(self) -> bool:
        return not self.finished.is_set()


class EffectScheduler:
    """
    Runs at most one effect at a time on a ChannelSink.

    Handles:
    - Starting and preempting effects
    - Stop requests (non-blocking)
    - Master enable overlay (mute, not stop)
    - Direct one-shot color writes
    """

    def __init__(
        self,
        sink: ChannelSink,
        catalog: t.Optional[EffectCatalog] = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        enabled: bool = True,
    ):
        """
        Initialize the scheduler.

        Args:
            sink: Channel sink to write through; its gate becomes the master enable
            catalog: Effect bodies by kind (defaults to the built-in catalog)
            grace_period: Seconds an effect being replaced gets to exit
            enabled: Initial master enable
        """
        self.sink = sink
        self.catalog = catalog if catalog is not None else build_default_catalog()
        self.grace_period = grace_period

        self._lock = threading.Lock()
        self._current: t.Optional[EffectHandle] = None
        self._gate = sink.gate
        if enabled:
            self._gate.set()
        else:
            self._gate.clear()

        # Callbacks
        self.on_effect_started: t.Optional[t.Callable[[EffectKind], None]] = None
        self.on_effect_finished: t.Optional[t.Callable[[EffectKind, bool], None]] = None

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def start_effect(self, kind: t.Union[EffectKind, str]) -> bool:
        """
        Start an effect, replacing whatever is running.

        Returns immediately. The previous effect's token is canceled before
        the new thread starts, but the previous body may still write for up
        to one wait slice after that.

        Returns:
            False if the kind is unknown or output is disabled, True otherwise
        """
        effect_kind = get_effect_kind_enum(kind)
        body = self.catalog.get(effect_kind) if effect_kind is not None else None
        if effect_kind is None or body is None:
            logger.warning(f"Unknown effect: {kind!r}")
            return False

        with self._lock:
            if not self._gate.is_set():
                logger.info(f"Not starting {effect_kind.value}: LED output disabled")
                return False
            previous = self._current
            if previous is not None:
                previous.token.cancel()

        if previous is not None:
            logger.debug(f"Preempting {previous.kind.value} for {effect_kind.value}")
            self._join(previous, self.grace_period)

        handle = EffectHandle(kind=effect_kind, token=CancellationToken())
        handle.thread = threading.Thread(
            target=self._run_effect,
            args=(handle, body),
            name=f"effect-{effect_kind.value}",
            daemon=True,
        )

        with self._lock:
            if not self._gate.is_set():
                logger.info(f"Not starting {effect_kind.value}: LED output disabled")
                return False
            # A concurrent start may have installed its own handle meanwhile
            if self._current is not None:
                self._current.token.cancel()
            self._current = handle

        handle.thread.start()
        logger.info(f"Started effect {effect_kind.value} (token #{handle.token.generation})")
        self._notify_started(effect_kind)
        return True

    def stop_current_effect(self) -> None:
        """Cancel the running effect, if any. Does not wait for it to exit."""
        with self._lock:
            handle = self._current
            if handle is None:
                logger.debug("Stop requested, no effect running")
                return
            canceled = handle.token.cancel()

        if canceled:
            logger.info(f"Stopping effect {handle.kind.value}")

    def _run_effect(self, handle: EffectHandle, body: EffectBody) -> None:
        """Worker thread: run the body, then hand the slot back."""
        try:
            body(self.sink, handle.token)
        except Exception:
            logger.exception(f"Effect {handle.kind.value} crashed")

        canceled = handle.token.canceled
        try:
            if not canceled and self._is_current(handle):
                # Catalog bodies end dark themselves; this covers any that don't
                write_off(self.sink)
        finally:
            with self._lock:
                if self._current is handle:
                    self._current = None
                    became_idle = True
                else:
                    became_idle = False
                handle.finished.set()

        if became_idle:
            logger.info(
                f"Effect {handle.kind.value} {'canceled' if canceled else 'finished'} "
                f"after {time.monotonic() - handle.started_at:.2f}s"
            )
        else:
            logger.debug(f"Discarding stale completion of {handle.kind.value} (token #{handle.token.generation})")
        self._notify_finished(handle.kind, canceled)

    def _is_current(self, handle: EffectHandle) -> bool:
        with self._lock:
            return self._current is handle

    def _join(self, handle: EffectHandle, timeout: t.Optional[float]) -> bool:
        """Wait up to ``timeout`` for an effect to finish. Never call with the lock held."""
        if handle.thread is threading.current_thread():
            return not handle.alive
        return handle.finished.wait(timeout)

    def _stop_and_settle(self) -> None:
        """Stop the current effect and give its thread the grace window to exit."""
        with self._lock:
            handle = self._current
        if handle is None:
            return
        self.stop_current_effect()
        if not self._join(handle, self.grace_period):
            logger.debug(f"Effect {handle.kind.value} still exiting after grace period")

    def wait_until_idle(self, timeout: t.Optional[float] = None) -> bool:
        """
        Block until no effect is running.

        Returns:
            True if idle, False if ``timeout`` expired first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                handle = self._current
            if handle is None:
                return True
            if handle.thread is threading.current_thread():
                return False
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            self._join(handle, remaining)

    # ------------------------------------------------------------------
    # Direct writes
    # ------------------------------------------------------------------

    def set_color(self, red: int, green: int, blue: int) -> None:
        """
        Stop any effect and show a solid color. Values are clamped.

        Raises:
            InvalidColorValue: a value is not an integer
            HardwareWriteFailure: the hardware write failed
        """
        color = Color(red, green, blue)
        self._stop_and_settle()
        self.sink.set_color(color)
        logger.debug(f"Set color {color.clamped()}")

    def set_channel(self, channel: t.Union[Channel, str], value: int) -> None:
        """
        Stop any effect and set one channel, leaving the others as they are.

        Raises:
            InvalidChannel: unknown channel name
            InvalidColorValue: value is not an integer
            HardwareWriteFailure: the hardware write failed
        """
        self._stop_and_settle()
        self.sink.write(channel, value)

    def show_static(self, color: Color) -> None:
        """Stop any effect and show a palette color (e.g. charging complete)."""
        self.set_color(*color.as_tuple())

    def turn_off(self) -> None:
        """Stop any effect and turn the LED off."""
        self._stop_and_settle()
        self.sink.off()

    # ------------------------------------------------------------------
    # Master enable
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool) -> None:
        """
        Mute or unmute hardware output.

        Disabling writes "off" immediately but leaves a running effect
        running; its writes are suppressed until output is enabled again.
        """
        with self._lock:
            was_enabled = self._gate.is_set()
            if enabled:
                self._gate.set()
            else:
                self._gate.clear()

        if was_enabled == enabled:
            return

        logger.info(f"LED output {'enabled' if enabled else 'disabled'}")
        if not enabled:
            try:
                self.sink.off(force=True)
            except HardwareWriteFailure as e:
                logger.warning(f"Could not turn LED off while disabling: {e}")

    def is_enabled(self) -> bool:
        return self._gate.is_set()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def is_effect_active(self) -> bool:
        with self._lock:
            return self._current is not None

    def current_effect_kind(self) -> t.Optional[EffectKind]:
        with self._lock:
            return self._current.kind if self._current is not None else None

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return SchedulerState.RUNNING if self._current is not None else SchedulerState.IDLE

    def get_status(self) -> t.Dict[str, t.Any]:
        """Snapshot for diagnostics."""
        with self._lock:
            handle = self._current
            return {
                "state": (SchedulerState.RUNNING if handle else SchedulerState.IDLE).value,
                "effect": handle.kind.value if handle else None,
                "generation": handle.token.generation if handle else None,
                "running_for": time.monotonic() - handle.started_at if handle else 0.0,
                "enabled": self._gate.is_set(),
                "available_effects": [kind.value for kind in self.catalog.kinds()],
            }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self, timeout: float = 1.0) -> None:
        """Stop any effect, wait for it and leave the LED dark."""
        self.stop_current_effect()
        if not self.wait_until_idle(timeout):
            logger.warning("Effect did not exit during shutdown")
        write_off(self.sink)
        logger.info("Effect scheduler shut down")

    def _notify_started(self, kind: EffectKind) -> None:
        if self.on_effect_started:
            try:
                self.on_effect_started(kind)
            except Exception as e:
                logger.error(f"Error in effect started callback: {e}")

    def _notify_finished(self, kind: EffectKind, canceled: bool) -> None:
        if self.on_effect_finished:
            try:
                self.on_effect_finished(kind, canceled)
            except Exception as e:
                logger.error(f"Error in effect finished callback: {e}")
