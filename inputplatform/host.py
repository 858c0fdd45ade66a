"""Host capability providers.

A provider is the bridge between the detector and whatever actually knows
the input state (a game engine, a browser bridge, a test fixture).
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from ._types import ClassificationInput
from .errors import CapabilityQueryUnavailable, UnresolvableSubjectError

logger = logging.getLogger(__name__)

SIGNALS: tuple[str, ...] = (
    "vr_enabled",
    "gamepad_enabled",
    "ten_foot_interface",
    "touch_enabled",
    "keyboard_enabled",
    "mouse_enabled",
    "gyroscope_enabled",
    "accelerometer_enabled",
    "console_button_glyph",
)

LOCAL_USER = "local"


class CapabilityProvider(abc.ABC):
    """Base class for host capability surfaces."""

    @property
    @abc.abstractmethod
    def name(self) -> str: ...

    @abc.abstractmethod
    def query(self, signal: str, subject: Any) -> Any:
        """Return the raw value of one signal, or raise CapabilityQueryUnavailable."""

    def resolve_subject(self) -> Optional[Any]:
        """The subject to classify for. None when the host has no local user."""
        return LOCAL_USER

    def viewport_size(self, subject: Any) -> Optional[tuple[float, float]]:
        return None

    def capture(self, subject: Optional[Any] = None) -> ClassificationInput:
        """Query every signal and build a snapshot.

        A signal that cannot be queried is treated as off instead of
        failing the whole capture.
        """
        if subject is None:
            subject = self.resolve_subject()
        if subject is None:
            raise UnresolvableSubjectError(f"{self.name}: no subject to classify")

        values: dict[str, Any] = {}
        for signal in SIGNALS:
            try:
                raw = self.query(signal, subject)
            except CapabilityQueryUnavailable as exc:
                logger.debug("%s: %s", self.name, exc)
                continue
            except Exception as exc:
                logger.debug("%s: query for %s failed: %s", self.name, signal, exc)
                continue
            if signal == "console_button_glyph":
                values[signal] = "" if raw is None else str(raw)
            else:
                values[signal] = bool(raw)

        try:
            size = self.viewport_size(subject)
        except Exception as exc:
            logger.debug("%s: viewport query failed: %s", self.name, exc)
            size = None
        if size is not None:
            values["viewport_width"], values["viewport_height"] = size

        return ClassificationInput(**values)


class StaticCapabilityProvider(CapabilityProvider):
    """Provider backed by values pushed in from elsewhere."""

    def __init__(self, subject: Optional[Any] = LOCAL_USER, **signals: Any) -> None:
        self._subject = subject
        self._values: dict[str, Any] = {}
        self._unavailable: set[str] = set()
        self._viewport: Optional[tuple[float, float]] = None
        self.set(**signals)

    @property
    def name(self) -> str:
        return "static"

    def set(self, **signals: Any) -> None:
        for signal, value in signals.items():
            if signal in ("viewport_width", "viewport_height"):
                raise ValueError("use set_viewport() for viewport dimensions")
            if signal not in SIGNALS:
                raise ValueError(f"Unknown capability signal: {signal}")
            self._values[signal] = value
            self._unavailable.discard(signal)

    def set_snapshot(self, snapshot: ClassificationInput) -> None:
        """Replace every value with the contents of a snapshot."""
        data = snapshot.to_dict()
        width = data.pop("viewport_width")
        height = data.pop("viewport_height")
        self._unavailable.clear()
        self.set(**data)
        if width is None or height is None:
            self._viewport = None
        else:
            self._viewport = (width, height)

    def set_viewport(self, width: Optional[float], height: Optional[float]) -> None:
        if width is None or height is None:
            self._viewport = None
        else:
            self._viewport = (float(width), float(height))

    def set_subject(self, subject: Optional[Any]) -> None:
        self._subject = subject

    def mark_unavailable(self, signal: str) -> None:
        if signal not in SIGNALS:
            raise ValueError(f"Unknown capability signal: {signal}")
        self._unavailable.add(signal)

    def resolve_subject(self) -> Optional[Any]:
        return self._subject

    def query(self, signal: str, subject: Any) -> Any:
        if signal in self._unavailable:
            raise CapabilityQueryUnavailable(signal, "marked unavailable")
        return self._values.get(signal, "" if signal == "console_button_glyph" else False)

    def viewport_size(self, subject: Any) -> Optional[tuple[float, float]]:
        return self._viewport
