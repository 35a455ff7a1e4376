"""
Healing Cache
-------------

In-memory memo from a locator signature to the locator that healed it.
Entries are looked up before any device work is done, so a locator
healed once during a test run is reused by every later resolution of
the same original locator.

One cache may back several
:class:`~locator_healing.session.HealingSession` objects running on
parallel test threads, so all access goes through a lock.  A ``put``
always replaces the previous entry for the signature; there is no
eviction and no expiry.  Call :meth:`HealingCache.clear` when the app
under test is reinstalled or otherwise known to have changed.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from .locators import LocatorSpec
from .utils.logger import get_logger


class HealingCache:
    """Thread-safe ``signature -> healed LocatorSpec`` map."""

    def __init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)
        self._entries: Dict[str, LocatorSpec] = {}
        self._lock = threading.Lock()

    def get(self, signature: str) -> Optional[LocatorSpec]:
        """Return the healed locator stored for ``signature``, if any."""
        with self._lock:
            return self._entries.get(signature)

    def put(self, signature: str, locator: LocatorSpec) -> None:
        """Store ``locator`` under ``signature``, replacing any previous entry."""
        with self._lock:
            previous = self._entries.get(signature)
            self._entries[signature] = locator
        if previous is not None and previous != locator:
            self.logger.info("Replaced healed locator for %s: %s -> %s", signature, previous, locator)
        else:
            self.logger.info("Cached healed locator for %s: %s", signature, locator)

    def items(self) -> List[Tuple[str, LocatorSpec]]:
        """Return a copy of all entries."""
        with self._lock:
            return list(self._entries.items())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, signature: object) -> bool:
        with self._lock:
            return signature in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["HealingCache"]
