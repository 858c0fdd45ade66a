"""Background driver that keeps a PlatformDetector current.

The watcher ticks on a daemon thread and also exposes hooks for host
events (controller connected/disconnected, capability changes) so a host
can push updates instead of waiting for the next tick.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from .config import PlatformConfig
from .detector import PlatformDetector

logger = logging.getLogger(__name__)

# Capability changes that trigger an immediate update
WATCHED_SIGNALS = frozenset(
    {"vr_enabled", "touch_enabled", "keyboard_enabled", "mouse_enabled"}
)


class PlatformWatcher:
    """Periodic update driver for a detector.

    Parameters
    ----------
    detector:
        The detector to keep current.
    config:
        Intervals to use.  Defaults to ``detector.config``.  An interval of
        zero disables that check.
    """

    def __init__(
        self,
        detector: PlatformDetector,
        config: Optional[PlatformConfig] = None,
    ) -> None:
        self.detector = detector
        self.config = config or detector.config
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._timers: set[threading.Timer] = set()
        self._timers_lock = threading.Lock()
        self._last_ten_foot: Optional[bool] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._safe_update()
        self._last_ten_foot = self._read_ten_foot()
        interval = self._tick_interval()
        if interval is None:
            logger.debug("All watcher intervals disabled, not starting tick thread")
            return
        self._stop_event.clear()
        self._worker = threading.Thread(
            target=self._tick_loop, args=(interval,), name="inputplatform-watcher", daemon=True
        )
        self._worker.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        with self._timers_lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        if self._worker is not None:
            self._worker.join(timeout=timeout)
            self._worker = None

    def __enter__(self) -> "PlatformWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Host event hooks
    # ------------------------------------------------------------------

    def on_gamepad_connected(self) -> None:
        """Update shortly after a controller connects.

        The host reports the new controller's glyphs a moment after the
        connect event, hence the delay.
        """
        delay = self.config.gamepad_connect_delay
        if delay <= 0:
            self._safe_update()
            return
        timer = threading.Timer(delay, self._run_timer)
        timer.daemon = True
        with self._timers_lock:
            self._timers.add(timer)
        timer.start()

    def on_gamepad_disconnected(self) -> None:
        self._safe_update()

    def on_capability_changed(self, signal: str) -> bool:
        """Returns True when the change triggered an update."""
        if signal not in WATCHED_SIGNALS:
            return False
        self._safe_update()
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _tick_interval(self) -> Optional[float]:
        intervals = [
            i
            for i in (self.config.update_interval, self.config.ten_foot_check_interval)
            if i > 0
        ]
        return min(intervals) if intervals else None

    def _tick_loop(self, interval: float) -> None:
        last_update = last_ten_foot = time.monotonic()
        while not self._stop_event.wait(timeout=interval):
            now = time.monotonic()
            if (
                self.config.update_interval > 0
                and now - last_update >= self.config.update_interval
            ):
                last_update = now
                self._safe_update()
            if (
                self.config.ten_foot_check_interval > 0
                and now - last_ten_foot >= self.config.ten_foot_check_interval
            ):
                last_ten_foot = now
                self.check_ten_foot()

    def check_ten_foot(self) -> bool:
        """Poll the ten-foot signal; update if it flipped since the last poll."""
        current = self._read_ten_foot()
        if current is None or current == self._last_ten_foot:
            return False
        self._last_ten_foot = current
        self._safe_update()
        return True

    def _read_ten_foot(self) -> Optional[bool]:
        try:
            return self.detector.provider.capture().ten_foot_interface
        except Exception as exc:
            logger.debug("Ten-foot check skipped: %s", exc)
            return None

    def _run_timer(self) -> None:
        with self._timers_lock:
            self._timers.discard(threading.current_thread())  # type: ignore[arg-type]
        if not self._stop_event.is_set():
            self._safe_update()

    def _safe_update(self) -> None:
        try:
            self.detector.update()
        except Exception:
            logger.warning("Platform update failed", exc_info=True)
