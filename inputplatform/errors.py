"""Exceptions raised by inputplatform."""

from __future__ import annotations


class InputPlatformError(RuntimeError):
    """Base class for inputplatform errors."""


class InvalidArgumentError(InputPlatformError, TypeError):
    """Raised when a subscriber callback is not callable."""


class UnresolvableSubjectError(InputPlatformError, LookupError):
    """Raised when the host has no subject (e.g. no local user) to classify."""


class CapabilityQueryUnavailable(InputPlatformError):
    """Raised by a provider when one capability signal cannot be queried."""

    def __init__(self, signal: str, reason: str = "") -> None:
        self.signal = signal
        message = f"capability '{signal}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)
