"""Errors raised and recorded by the healing engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from selenium.common.exceptions import (
    InvalidElementStateException,
    NoSuchElementException,
    TimeoutException,
)

if TYPE_CHECKING:
    from .locators import LocatorSpec

# Driver failures that mean "not there (yet)". Only these drive healing;
# every other driver error propagates.
RECOGNIZED_FAILURES = (NoSuchElementException, TimeoutException, InvalidElementStateException)


class LocatorHealingError(Exception):
    """Base class for all healing engine errors."""


class ElementNotFound(LocatorHealingError, NoSuchElementException):
    """Raised by ``resolve`` once every lookup strategy is exhausted.

    It is also a Selenium ``NoSuchElementException`` so test code that
    already catches the driver's error keeps working unchanged.  It
    pickles by its locators, so it survives process-based test runners.
    """

    def __init__(self, locator: "LocatorSpec", healed: Optional["LocatorSpec"] = None) -> None:
        self.locator = locator
        self.healed = healed
        message = f"Element not found for locator {locator.signature}"
        if healed is not None:
            message += f" (healed locator {healed.signature} also failed)"
        else:
            message += " (no healed locator was produced)"
        NoSuchElementException.__init__(self, message)
        self.args = (message,)

    def __reduce__(self):
        return self.__class__, (self.locator, self.healed)


class TransientUIInstability(LocatorHealingError):
    """Visibility or scroll retries ran out; the UI may still be settling.

    Recorded as the error of a failed presence check so that healing can
    take over.  It is never raised out of ``resolve``.
    """


class HealRequestFailed(LocatorHealingError):
    """The language model request failed in transport or returned garbage."""


class NoCandidateProduced(LocatorHealingError):
    """The model answered, but no line of the answer was a usable locator."""


class BatchUnresolved(LocatorHealingError):
    """One or more members of a batch stayed unresolved after healing."""

    def __init__(self, indices: Sequence[int]) -> None:
        self.indices = list(indices)
        super().__init__(f"Locators at indices {self.indices} are still missing after healing")

    def __reduce__(self):
        return self.__class__, (self.indices,)


__all__ = [
    "RECOGNIZED_FAILURES",
    "LocatorHealingError",
    "ElementNotFound",
    "TransientUIInstability",
    "HealRequestFailed",
    "NoCandidateProduced",
    "BatchUnresolved",
]
