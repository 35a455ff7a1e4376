"""
Batch Reconciler
----------------

Validates a whole page's worth of locators at once and heals all of
the missing ones with a single model call.

The result is all or nothing: either every input index resolves
(possibly through a healed locator) and a list of the same length is
returned, or the call fails as a whole and an empty list is returned,
even if some indices did heal.  Pass ``strict=True`` to get a
:class:`~locator_healing.exceptions.BatchUnresolved` naming the
unresolved indices instead of an empty list.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from .exceptions import BatchUnresolved
from .locators import HEALED, LocatorSpec
from .orchestrator import HealingOrchestrator
from .utils.logger import get_logger


class BatchReconciler:
    """Index-aligned validation and healing of a list of locators."""

    def __init__(self, orchestrator: HealingOrchestrator) -> None:
        self.orchestrator = orchestrator
        self.logger = get_logger(self.__class__.__name__)

    def find_missing(self, specs: Sequence[LocatorSpec], context: Any = None) -> List[int]:
        """Return the indices of ``specs`` not found directly or by scrolling."""
        missing: List[int] = []
        for index, spec in enumerate(specs):
            if self.orchestrator.locate(spec, context):
                self.logger.info("[OK] Element found: %s", spec)
            else:
                self.logger.info("[MISSING] Element not found: %s", spec)
                missing.append(index)
        return missing

    def reconcile(self, specs: Sequence[LocatorSpec], context: Any = None, strict: bool = False) -> List[LocatorSpec]:
        """Validate ``specs`` and heal the missing ones in one model call.

        Returns a list the same length as ``specs`` where healed indices
        carry their replacement, or ``[]`` if any index is still missing
        after healing.
        """
        updated = list(specs)
        if not updated:
            return []
        self.logger.info("Validating %s locator(s)", len(updated))

        missing = self.find_missing(updated, context)
        if missing:
            self.logger.info("Healing %s missing element(s)", len(missing))
            candidates = self.orchestrator.request_candidates([updated[i] for i in missing])
            for position, index in enumerate(missing):
                if position >= len(candidates):
                    self.logger.info("No candidate for index %s; keeping %s", index, updated[index])
                    continue
                try:
                    updated[index] = LocatorSpec.parse(candidates[position], source=HEALED)
                except ValueError as exc:
                    self.logger.warning("Candidate for index %s unusable (%s); keeping original", index, exc)
                    continue
                self.logger.info("Healed index %s: %s -> %s", index, specs[index], updated[index])

        unresolved = self.find_missing(updated, context)
        if unresolved:
            self.logger.warning("Still not found after healing at indices %s", unresolved)
            if strict:
                raise BatchUnresolved(unresolved)
            return []
        return updated


__all__ = ["BatchReconciler"]
