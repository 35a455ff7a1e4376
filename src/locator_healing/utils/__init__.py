"""
Utility subpackage for the healing engine.

Aggregates logging and wait helpers used throughout the package::

    from locator_healing.utils import get_logger, wait_for_presence
"""

from .logger import get_logger
from .wait_utils import PresenceResult, wait_for_presence, wait_for_screen_stable

__all__ = [
    "get_logger",
    "PresenceResult",
    "wait_for_presence",
    "wait_for_screen_stable",
]
