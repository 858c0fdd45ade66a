"""Tests for inputplatform.watcher — periodic driver and host event hooks."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

from inputplatform._types import Platform
from inputplatform.config import PlatformConfig
from inputplatform.detector import PlatformDetector
from inputplatform.host import StaticCapabilityProvider
from inputplatform.watcher import PlatformWatcher


def _mock_detector(**config_overrides) -> MagicMock:
    detector = MagicMock()
    detector.config = PlatformConfig(**config_overrides)
    detector.provider = StaticCapabilityProvider()
    return detector


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# ---------------------------------------------------------------------------
# Event hooks
# ---------------------------------------------------------------------------


class TestEventHooks:
    def test_watched_capability_triggers_update(self):
        detector = _mock_detector()
        watcher = PlatformWatcher(detector)
        for signal in ("vr_enabled", "touch_enabled", "keyboard_enabled", "mouse_enabled"):
            assert watcher.on_capability_changed(signal) is True
        assert detector.update.call_count == 4

    def test_other_capability_ignored(self):
        detector = _mock_detector()
        watcher = PlatformWatcher(detector)
        assert watcher.on_capability_changed("gyroscope_enabled") is False
        detector.update.assert_not_called()

    def test_gamepad_disconnected_updates(self):
        detector = _mock_detector()
        PlatformWatcher(detector).on_gamepad_disconnected()
        detector.update.assert_called_once_with()

    def test_gamepad_connected_without_delay(self):
        detector = _mock_detector(gamepad_connect_delay=0)
        PlatformWatcher(detector).on_gamepad_connected()
        detector.update.assert_called_once_with()

    def test_gamepad_connected_updates_after_delay(self):
        detector = _mock_detector(gamepad_connect_delay=0.05)
        updated = threading.Event()
        detector.update.side_effect = lambda: updated.set()
        PlatformWatcher(detector).on_gamepad_connected()
        assert updated.wait(2.0)

    def test_pending_timer_cancelled_on_stop(self):
        detector = _mock_detector(gamepad_connect_delay=1.0)
        watcher = PlatformWatcher(detector)
        watcher.on_gamepad_connected()
        watcher.stop()
        time.sleep(0.05)
        detector.update.assert_not_called()

    def test_update_failure_is_swallowed(self, caplog):
        detector = _mock_detector()
        detector.update.side_effect = RuntimeError("host gone")
        PlatformWatcher(detector).on_gamepad_disconnected()
        assert "Platform update failed" in caplog.text


# ---------------------------------------------------------------------------
# Ten-foot polling
# ---------------------------------------------------------------------------


class TestTenFootCheck:
    def test_updates_only_when_flag_flips(self):
        provider = StaticCapabilityProvider()
        detector = PlatformDetector(provider)
        watcher = PlatformWatcher(detector)

        assert watcher.check_ten_foot() is True  # first poll establishes baseline
        assert watcher.check_ten_foot() is False

        provider.set(ten_foot_interface=True)
        assert watcher.check_ten_foot() is True
        assert detector.get_platform() == Platform.CONSOLE
        assert watcher.check_ten_foot() is False

    def test_unresolvable_subject_skips(self):
        detector = _mock_detector()
        detector.provider = StaticCapabilityProvider(subject=None)
        assert PlatformWatcher(detector).check_ten_foot() is False
        detector.update.assert_not_called()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_start_runs_initial_update_and_ticks(self):
        detector = _mock_detector(update_interval=0.01, ten_foot_check_interval=0)
        watcher = PlatformWatcher(detector)
        watcher.start()
        try:
            assert watcher.running
            assert _wait_for(lambda: detector.update.call_count >= 3)
        finally:
            watcher.stop()
        assert not watcher.running

    def test_stop_halts_ticks(self):
        detector = _mock_detector(update_interval=0.01, ten_foot_check_interval=0)
        watcher = PlatformWatcher(detector)
        watcher.start()
        watcher.stop()
        calls = detector.update.call_count
        time.sleep(0.05)
        assert detector.update.call_count == calls

    def test_all_intervals_disabled(self):
        detector = _mock_detector(update_interval=0, ten_foot_check_interval=0)
        watcher = PlatformWatcher(detector)
        watcher.start()
        assert not watcher.running
        detector.update.assert_called_once_with()

    def test_context_manager_notifies_real_subscribers(self):
        provider = StaticCapabilityProvider()
        config = PlatformConfig(update_interval=0.01, ten_foot_check_interval=0)
        detector = PlatformDetector(provider, config)
        seen: list[Platform] = []
        lock = threading.Lock()

        def _record(platform, console_type):
            with lock:
                seen.append(platform)

        detector.subscribe_to_platform_change(_record)
        with PlatformWatcher(detector):
            provider.set(vr_enabled=True)
            assert _wait_for(lambda: Platform.VR in seen)
        detector.close(timeout=2.0)
        assert Platform.DESKTOP in seen
        assert seen.count(Platform.VR) == 1

    def test_tick_failure_does_not_kill_thread(self):
        detector = _mock_detector(update_interval=0.01, ten_foot_check_interval=0)
        calls = {"n": 0}

        def _flaky():
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("transient")

        detector.update.side_effect = _flaky
        watcher = PlatformWatcher(detector)
        watcher.start()
        try:
            assert _wait_for(lambda: calls["n"] >= 4)
            assert watcher.running
        finally:
            watcher.stop()
