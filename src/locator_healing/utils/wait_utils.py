"""
Wait Utilities
--------------

All waiting done by the healing engine lives here.  Two waits exist:

``wait_for_presence``
    Bounded wait for a locator to match at least one element within a
    search context.  Rather than raising, it reports the outcome as a
    :class:`PresenceResult` so that callers can branch on it.  Only the
    driver failures listed in
    :data:`~locator_healing.exceptions.RECOGNIZED_FAILURES` are turned into
    a failed result; anything else propagates.

``wait_for_screen_stable``
    Polls the serialized screen at a fixed interval until two
    consecutive reads agree, giving up after a small number of polls.
    Used after swipes so that presence is checked against a screen
    that has stopped moving.

Both waits are strictly bounded; neither spins or blocks indefinitely.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..exceptions import RECOGNIZED_FAILURES
from ..locators import LocatorSpec
from .logger import get_logger


logger = get_logger(__name__)


@dataclass
class PresenceResult:
    """Outcome of a presence check."""

    found: bool
    elements: List[Any] = field(default_factory=list)
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.found

    @classmethod
    def success(cls, elements: List[Any]) -> "PresenceResult":
        return cls(True, list(elements))

    @classmethod
    def failure(cls, error: Optional[BaseException] = None) -> "PresenceResult":
        return cls(False, [], error)


def wait_for_presence(driver: Any, spec: LocatorSpec, context: Any = None, timeout: Optional[float] = None) -> PresenceResult:
    """Wait for ``spec`` to match within ``context`` for at most ``timeout`` seconds.

    ``driver`` is an :class:`~locator_healing.driver.AppiumDriverAdapter`
    (or anything with the same ``find_presence`` method).
    """
    try:
        elements = driver.find_presence(spec, context, timeout)
    except RECOGNIZED_FAILURES as exc:
        logger.debug("Presence check for %s failed: %s", spec, exc.__class__.__name__)
        return PresenceResult.failure(exc)
    if not elements:
        return PresenceResult.failure()
    return PresenceResult.success(elements)


def wait_for_screen_stable(driver: Any, interval: float = 0.5, max_polls: int = 5) -> bool:
    """Return ``True`` once two consecutive page sources are identical.

    At most ``max_polls`` reads are made, ``interval`` seconds apart.
    Returns ``False`` if the screen never settled; callers proceed
    anyway.
    """
    previous: Optional[str] = None
    for poll in range(max_polls):
        current = driver.page_source()
        if previous is not None and current == previous:
            logger.debug("Screen stable after %s polls", poll + 1)
            return True
        previous = current
        if poll < max_polls - 1:
            time.sleep(interval)
    logger.debug("Screen still changing after %s polls; continuing", max_polls)
    return False


__all__ = ["PresenceResult", "wait_for_presence", "wait_for_screen_stable"]
