"""
inputplatform.

Infers a coarse device platform (Desktop, Mobile, Tablet, Console, VR)
and console controller family from host input-capability flags, and
notifies subscribers when the inferred platform changes.
"""

from __future__ import annotations

__version__ = "1.0.0"

from ._types import ClassificationInput, ConsoleType, Platform, PlatformState
from .classifier import classify
from .config import PlatformConfig, load_config
from .detector import (
    PlatformDetector,
    get_default_detector,
    reset_default_detector,
    set_default_detector,
)
from .errors import (
    CapabilityQueryUnavailable,
    InputPlatformError,
    InvalidArgumentError,
    UnresolvableSubjectError,
)
from .host import CapabilityProvider, StaticCapabilityProvider
from .subscriptions import Dispatcher, Subscription, SubscriptionRegistry
from .watcher import PlatformWatcher

__all__ = [
    "__version__",
    "CapabilityProvider",
    "CapabilityQueryUnavailable",
    "ClassificationInput",
    "ConsoleType",
    "Dispatcher",
    "InputPlatformError",
    "InvalidArgumentError",
    "Platform",
    "PlatformConfig",
    "PlatformDetector",
    "PlatformState",
    "PlatformWatcher",
    "StaticCapabilityProvider",
    "Subscription",
    "SubscriptionRegistry",
    "UnresolvableSubjectError",
    "classify",
    "get_default_detector",
    "load_config",
    "reset_default_detector",
    "set_default_detector",
]
