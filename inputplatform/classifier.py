"""Platform classification from a capability snapshot.

Rules are evaluated top to bottom and the first match wins, so a VR
headset that also reports a gamepad is VR, and a touch device with a
gamepad attached is Console.
"""

from __future__ import annotations

import logging
from typing import Optional

from ._types import ClassificationInput, ConsoleType, Platform
from .config import PlatformConfig

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = PlatformConfig()


def classify(
    snapshot: ClassificationInput,
    config: Optional[PlatformConfig] = None,
) -> tuple[Platform, Optional[ConsoleType]]:
    """Map a capability snapshot to ``(platform, console_type)``."""
    config = config or _DEFAULT_CONFIG

    if snapshot.vr_enabled:
        return Platform.VR, None

    if snapshot.gamepad_enabled or (
        snapshot.ten_foot_interface and not snapshot.mouse_enabled
    ):
        return Platform.CONSOLE, console_type_for_glyph(
            snapshot.console_button_glyph, config
        )

    if snapshot.touch_enabled and not (
        snapshot.keyboard_enabled or snapshot.mouse_enabled
    ):
        return resolve_handheld(snapshot, config), None

    if snapshot.gyroscope_enabled or snapshot.accelerometer_enabled:
        return resolve_handheld(snapshot, config), None

    return Platform.DESKTOP, None


def console_type_for_glyph(glyph: str, config: Optional[PlatformConfig] = None) -> ConsoleType:
    """Only two controller families are distinguishable; anything else is Xbox."""
    config = config or _DEFAULT_CONFIG
    if glyph == config.square_glyph:
        return ConsoleType.PLAYSTATION
    return ConsoleType.XBOX


def resolve_handheld(
    snapshot: ClassificationInput,
    config: Optional[PlatformConfig] = None,
) -> Platform:
    """Tablet vs Mobile by viewport squareness. Mobile when undecidable."""
    config = config or _DEFAULT_CONFIG
    if not config.tablet_detection_enabled:
        return Platform.MOBILE

    ratio = snapshot.aspect_ratio
    if ratio is None:
        logger.debug("No viewport size available, assuming Mobile")
        return Platform.MOBILE

    if ratio < config.tablet_aspect_ratio_threshold:
        return Platform.TABLET
    return Platform.MOBILE
