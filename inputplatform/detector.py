"""Cached platform state with change notification.

Usage::

    from inputplatform import PlatformDetector, StaticCapabilityProvider

    provider = StaticCapabilityProvider(touch_enabled=True)
    provider.set_viewport(768, 1024)
    detector = PlatformDetector(provider)

    sub = detector.subscribe_to_platform_change(
        lambda platform, console_type: print(platform, console_type)
    )
    detector.update()
    sub.disconnect()
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from ._types import ClassificationInput, ConsoleType, Platform, PlatformState
from .classifier import classify
from .config import PlatformConfig
from .errors import UnresolvableSubjectError
from .host import CapabilityProvider
from .subscriptions import (
    CONSOLE_TYPE,
    PLATFORM,
    Dispatcher,
    Subscription,
    SubscriptionRegistry,
)

logger = logging.getLogger(__name__)

DEFAULT_STATE = PlatformState(Platform.DESKTOP, None)


class PlatformDetector:
    """Owns the current ``(platform, console_type)`` and its subscribers.

    ``compute()`` is a side-effect free query.  ``refresh()`` writes the
    cache.  ``update()`` refreshes and notifies subscribers of changes.
    Reads (``get_platform()`` and friends) refresh lazily the first time.
    """

    def __init__(
        self,
        provider: CapabilityProvider,
        config: Optional[PlatformConfig] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self.provider = provider
        self.config = config or PlatformConfig()
        self.subscriptions = SubscriptionRegistry()
        self.dispatcher = dispatcher or Dispatcher()
        self._state: Optional[PlatformState] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, snapshot: ClassificationInput) -> tuple[Platform, Optional[ConsoleType]]:
        return classify(snapshot, self.config)

    def compute(self, subject: Optional[Any] = None) -> tuple[Platform, Optional[ConsoleType]]:
        """Classify the host's current capabilities without touching the cache."""
        try:
            snapshot = self.provider.capture(subject)
            return self.classify(snapshot)
        except UnresolvableSubjectError as exc:
            logger.warning("%s, returning defaults", exc)
            return DEFAULT_STATE.platform, DEFAULT_STATE.console_type
        except Exception as exc:
            fallback = self._state or DEFAULT_STATE
            logger.warning(
                "Platform classification failed (%s), keeping %s",
                exc,
                fallback.platform.value,
            )
            return fallback.platform, fallback.console_type

    def refresh(
        self, subject: Optional[Any] = None
    ) -> tuple[Optional[PlatformState], PlatformState]:
        """Recompute and store the state. Returns ``(previous, current)``."""
        with self._lock:
            previous = self._state
            platform, console_type = self.compute(subject)
            self._state = PlatformState(platform, console_type)
            return previous, self._state

    def update(self, subject: Optional[Any] = None) -> Platform:
        """Refresh and notify subscribers of whatever changed."""
        with self._lock:
            previous, current = self.refresh(subject)
            old_platform = previous.platform if previous else None
            old_console_type = previous.console_type if previous else None

            if current.platform != old_platform:
                logger.info(
                    "Platform changed: %s -> %s",
                    old_platform.value if old_platform else None,
                    current.platform.value,
                )
                self.dispatcher.dispatch(
                    self.subscriptions, PLATFORM, current.platform, current.console_type
                )

            if (
                current.platform == Platform.CONSOLE
                and current.console_type != old_console_type
            ):
                logger.info(
                    "Console type changed: %s -> %s",
                    old_console_type.value if old_console_type else None,
                    current.console_type.value if current.console_type else None,
                )
                self.dispatcher.dispatch(
                    self.subscriptions, CONSOLE_TYPE, current.console_type
                )

            return current.platform

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlatformState:
        with self._lock:
            if self._state is None:
                self.refresh()
            return self._state

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def get_platform(self) -> Platform:
        return self.state.platform

    def get_console_type(self) -> Optional[ConsoleType]:
        return self.state.console_type

    def is_desktop(self) -> bool:
        return self.get_platform() == Platform.DESKTOP

    def is_mobile(self) -> bool:
        return self.get_platform() == Platform.MOBILE

    def is_tablet(self) -> bool:
        return self.get_platform() == Platform.TABLET

    def is_console(self) -> bool:
        return self.get_platform() == Platform.CONSOLE

    def is_vr(self) -> bool:
        return self.get_platform() == Platform.VR

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_to_platform_change(
        self, callback: Callable[[Platform, Optional[ConsoleType]], Any]
    ) -> Subscription:
        return self.subscriptions.subscribe(PLATFORM, callback)

    def subscribe_to_console_type_change(
        self, callback: Callable[[Optional[ConsoleType]], Any]
    ) -> Subscription:
        return self.subscriptions.subscribe(CONSOLE_TYPE, callback)

    def remove_callback(self, subscription_id: int) -> bool:
        """Legacy id-based removal. Prefer ``Subscription.disconnect()``."""
        return self.subscriptions.remove_by_id(subscription_id)

    def close(self, timeout: Optional[float] = 5.0) -> bool:
        """Wait for in-flight subscriber callbacks."""
        return self.dispatcher.drain(timeout)


# ---------------------------------------------------------------------------
# Process-wide default instance (optional convenience)
# ---------------------------------------------------------------------------

_default_detector: Optional[PlatformDetector] = None


def get_default_detector() -> PlatformDetector:
    """Return the detector installed with ``set_default_detector()``."""
    if _default_detector is None:
        raise RuntimeError(
            "No default PlatformDetector installed; call set_default_detector() first"
        )
    return _default_detector


def set_default_detector(detector: PlatformDetector) -> None:
    global _default_detector
    _default_detector = detector


def reset_default_detector() -> None:
    global _default_detector
    _default_detector = None
