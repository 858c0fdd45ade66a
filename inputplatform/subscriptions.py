"""Change subscriptions and fire-and-forget dispatch.

Two independent registries (platform, console type) share one id
counter so ids never collide across kinds.  Dispatch iterates a snapshot
of a registry and runs every callback on its own daemon thread: a slow or
failing subscriber never blocks the caller or its siblings.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
import warnings
import weakref
from typing import Any, Callable, Optional

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

PLATFORM = "platform"
CONSOLE_TYPE = "console_type"
KINDS = (PLATFORM, CONSOLE_TYPE)


class Subscription:
    """Handle returned by a subscribe call. ``disconnect()`` revokes it."""

    def __init__(
        self,
        registry: "SubscriptionRegistry",
        kind: str,
        subscription_id: int,
        callback: Callable[..., Any],
    ) -> None:
        self._registry_ref = weakref.ref(registry)
        self.kind = kind
        self.id = subscription_id
        self.callback = callback

    @property
    def connected(self) -> bool:
        registry = self._registry_ref()
        return registry is not None and registry.is_live(self.kind, self.id)

    def disconnect(self) -> None:
        registry = self._registry_ref()
        if registry is not None:
            registry.remove(self.kind, self.id)

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, kind={self.kind!r}, connected={self.connected})"


class SubscriptionRegistry:
    """Id -> callback mappings for each change kind."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[int, Callable[..., Any]]] = {k: {} for k in KINDS}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, kind: str, callback: Callable[..., Any]) -> Subscription:
        if kind not in self._entries:
            raise ValueError(f"Unknown subscription kind: {kind}")
        if not callable(callback):
            raise InvalidArgumentError(
                f"callback must be callable, got {type(callback).__name__}"
            )
        with self._lock:
            subscription_id = next(self._ids)
            self._entries[kind][subscription_id] = callback
        return Subscription(self, kind, subscription_id, callback)

    def remove(self, kind: str, subscription_id: int) -> bool:
        with self._lock:
            return self._entries[kind].pop(subscription_id, None) is not None

    def remove_by_id(self, subscription_id: int) -> bool:
        """Remove an id from whichever registry holds it.

        Deprecated: keep the Subscription handle and call ``disconnect()``.
        """
        warnings.warn(
            "remove_by_id() is deprecated; use Subscription.disconnect()",
            DeprecationWarning,
            stacklevel=2,
        )
        removed = False
        with self._lock:
            for entries in self._entries.values():
                if entries.pop(subscription_id, None) is not None:
                    removed = True
        return removed

    def is_live(self, kind: str, subscription_id: int) -> bool:
        with self._lock:
            return subscription_id in self._entries[kind]

    def snapshot(self, kind: str) -> list[tuple[int, Callable[..., Any]]]:
        with self._lock:
            return list(self._entries[kind].items())

    def count(self, kind: str) -> int:
        with self._lock:
            return len(self._entries[kind])

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._entries.values())


class Dispatcher:
    """Runs each subscriber callback on its own daemon thread."""

    def __init__(self) -> None:
        self._workers: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def dispatch(
        self,
        registry: SubscriptionRegistry,
        kind: str,
        *args: Any,
    ) -> int:
        """Start one worker per live subscriber. Returns the number started."""
        entries = registry.snapshot(kind)
        started = 0
        for subscription_id, callback in entries:
            worker = threading.Thread(
                target=self._run,
                args=(registry, kind, subscription_id, callback, args),
                name=f"inputplatform-{kind}-{subscription_id}",
                daemon=True,
            )
            with self._lock:
                self._workers.add(worker)
            try:
                worker.start()
            except Exception:
                with self._lock:
                    self._workers.discard(worker)
                logger.warning(
                    "Could not start dispatch for subscriber %d (%s)",
                    subscription_id,
                    kind,
                    exc_info=True,
                )
                continue
            started += 1
        return started

    def _run(
        self,
        registry: SubscriptionRegistry,
        kind: str,
        subscription_id: int,
        callback: Callable[..., Any],
        args: tuple[Any, ...],
    ) -> None:
        try:
            # Disconnected between snapshot and start
            if not registry.is_live(kind, subscription_id):
                return
            callback(*args)
        except Exception:
            logger.warning(
                "Subscriber %d (%s) raised during dispatch",
                subscription_id,
                kind,
                exc_info=True,
            )
        finally:
            with self._lock:
                self._workers.discard(threading.current_thread())

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._workers)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight callbacks. Returns False if some are still running."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                workers = list(self._workers)
            if not workers:
                return True
            running = [w for w in workers if w.is_alive()]
            if not running:
                # Added but not started yet
                time.sleep(0.005)
            for worker in running:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                worker.join(remaining)
            if deadline is not None and time.monotonic() >= deadline:
                with self._lock:
                    return not self._workers
