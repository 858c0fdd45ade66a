"""Configuration for platform detection.

Settings come from a JSON file (``~/.inputplatform/config.json`` unless
``INPUTPLATFORM_CONFIG`` points elsewhere) with environment overrides
applied on top::

    INPUTPLATFORM_TABLET_DETECTION=0        # collapse Tablet into Mobile
    INPUTPLATFORM_TABLET_ASPECT_RATIO=1.6
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class PlatformConfig:
    tablet_detection_enabled: bool = True
    tablet_aspect_ratio_threshold: float = 1.5
    square_glyph: str = "ButtonSquare"
    update_interval: float = 1.0  # seconds between watcher ticks
    ten_foot_check_interval: float = 2.0
    gamepad_connect_delay: float = 0.1

    def __post_init__(self) -> None:
        if self.tablet_aspect_ratio_threshold <= 0:
            raise ValueError(
                "tablet_aspect_ratio_threshold must be positive, "
                f"got {self.tablet_aspect_ratio_threshold}"
            )
        for name in ("update_interval", "ten_foot_check_interval", "gamepad_connect_delay"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlatformConfig":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "tablet_detection_enabled" in values:
            values["tablet_detection_enabled"] = _parse_flag(values["tablet_detection_enabled"])
        return cls(**values)


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_VALUES
    return bool(value)


def _config_path() -> Path:
    env_path = os.environ.get("INPUTPLATFORM_CONFIG", "")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".inputplatform" / "config.json"


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return data


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    tablet = os.environ.get("INPUTPLATFORM_TABLET_DETECTION", "")
    if tablet:
        data["tablet_detection_enabled"] = _parse_flag(tablet)
    ratio = os.environ.get("INPUTPLATFORM_TABLET_ASPECT_RATIO", "")
    if ratio:
        try:
            data["tablet_aspect_ratio_threshold"] = float(ratio)
        except ValueError:
            logger.warning("Invalid INPUTPLATFORM_TABLET_ASPECT_RATIO=%r, ignoring", ratio)
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> PlatformConfig:
    """Load config from file, then apply environment overrides."""
    config_path = Path(path).expanduser() if path else _config_path()
    data = _apply_env_overrides(_read_config_file(config_path))
    return PlatformConfig.from_dict(data)
