"""Shared enums and dataclasses for platform detection."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional


class Platform(str, Enum):
    DESKTOP = "Desktop"
    MOBILE = "Mobile"
    TABLET = "Tablet"
    CONSOLE = "Console"
    VR = "VR"


class ConsoleType(str, Enum):
    XBOX = "Xbox"
    PLAYSTATION = "PlayStation"


# Host-side (camelCase) names accepted by ClassificationInput.from_dict
_HOST_ALIASES = {
    "vrEnabled": "vr_enabled",
    "gamepadEnabled": "gamepad_enabled",
    "tenFootInterface": "ten_foot_interface",
    "touchEnabled": "touch_enabled",
    "keyboardEnabled": "keyboard_enabled",
    "mouseEnabled": "mouse_enabled",
    "gyroscopeEnabled": "gyroscope_enabled",
    "accelerometerEnabled": "accelerometer_enabled",
    "consoleButtonGlyph": "console_button_glyph",
    "viewportWidth": "viewport_width",
    "viewportHeight": "viewport_height",
}


def _parse_dimension(name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class ClassificationInput:
    """Snapshot of host input capabilities, taken fresh for each classification."""

    vr_enabled: bool = False
    gamepad_enabled: bool = False
    ten_foot_interface: bool = False
    touch_enabled: bool = False
    keyboard_enabled: bool = False
    mouse_enabled: bool = False
    gyroscope_enabled: bool = False
    accelerometer_enabled: bool = False
    console_button_glyph: str = ""
    viewport_width: Optional[float] = None
    viewport_height: Optional[float] = None

    @property
    def aspect_ratio(self) -> Optional[float]:
        """Long side over short side, or None without a usable viewport."""
        width, height = self.viewport_width, self.viewport_height
        if width is None or height is None or width <= 0 or height <= 0:
            return None
        return max(width, height) / min(width, height)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClassificationInput":
        """Build a snapshot from host data, validating each value.

        Flags must be real booleans and viewport dimensions numbers;
        anything else raises TypeError or ValueError.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _HOST_ALIASES.get(key, key)
            if name not in known:
                continue
            if name in ("viewport_width", "viewport_height"):
                kwargs[name] = _parse_dimension(name, value)
            elif name == "console_button_glyph":
                if value is not None and not isinstance(value, str):
                    raise TypeError(f"{key} must be a string, got {type(value).__name__}")
                kwargs[name] = value or ""
            else:
                if not isinstance(value, bool):
                    raise TypeError(f"{key} must be a boolean, got {value!r}")
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PlatformState:
    platform: Platform
    console_type: Optional[ConsoleType] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "console_type": self.console_type.value if self.console_type else None,
        }
