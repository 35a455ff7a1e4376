"""
Healing Orchestrator
--------------------

Resolves a single locator to live elements, healing it when the app
under test has changed underneath it.  Resolution runs through these
stages, stopping at the first that finds the element:

1. **Cache**: if this locator was healed earlier in the session, try
   the healed locator first.  A miss here does not evict the entry.
2. **Direct**: bounded visibility wait on the original locator.
3. **Scroll**: swipe the viewport a few times, looking after each
   swipe.
4. **Heal**: snapshot the screen, ask the model for a corrected
   locator, cache the first usable candidate and try it once
   (without scrolling).

If every stage fails :class:`~locator_healing.exceptions.ElementNotFound`
is raised, naming the original and any healed locator that was tried.
Only the driver's not-found, timeout and invalid-state errors move the
resolution from one stage to the next; any other driver error
propagates immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from .exceptions import ElementNotFound, HealRequestFailed, NoCandidateProduced, TransientUIInstability
from .locators import HEALED, LocatorSpec
from .prompts import PromptBuilder
from .response_parser import ResponseInterpreter
from .scroll import ScrollSearch
from .utils.logger import get_logger
from .utils.wait_utils import PresenceResult, wait_for_presence

if TYPE_CHECKING:
    from .session import HealingSession


class HealingOrchestrator:
    """Drive one locator through cache, direct, scroll and AI healing stages."""

    def __init__(
        self,
        session: "HealingSession",
        prompt_builder: Optional[PromptBuilder] = None,
        interpreter: Optional[ResponseInterpreter] = None,
    ) -> None:
        self.session = session
        self.settings = session.settings
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.interpreter = interpreter or ResponseInterpreter()
        self.scroller = ScrollSearch.from_settings(session.driver, session.settings)
        self.logger = get_logger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    def resolve(self, spec: LocatorSpec, context: Any = None) -> Any:
        """Return the first element matching ``spec``, healing if necessary."""
        return self.resolve_all(spec, context)[0]

    def resolve_all(self, spec: LocatorSpec, context: Any = None) -> List[Any]:
        """Return every element matching ``spec``, healing if necessary."""
        signature = spec.signature
        cached = self.session.cache.get(signature)
        if cached is not None:
            result = self.attempt(cached, context)
            if result:
                self.logger.info("Resolved %s through cached healed locator %s", spec, cached)
                return result.elements
            self.logger.info("Cached healed locator %s did not match; retrying original %s", cached, spec)

        result = self.locate(spec, context)
        if result:
            return result.elements

        self.logger.info("Element issue detected for %s; triggering healing", spec)
        candidates = self.request_candidates([spec])
        healed = self._first_parseable(candidates)
        if healed is None:
            raise ElementNotFound(spec) from result.error

        self.session.cache.put(signature, healed)
        retry = self.attempt(healed, context)
        if retry:
            self.logger.info("Healing successful: %s -> %s", spec, healed)
            return retry.elements
        self.logger.warning("Healed locator %s did not match either", healed)
        raise ElementNotFound(spec, healed) from retry.error

    # Stages -------------------------------------------------------------
    def attempt(self, spec: LocatorSpec, context: Any = None, timeout: Optional[float] = None) -> PresenceResult:
        """Bounded, non-scrolling presence check."""
        if timeout is None:
            timeout = self.settings.visibility_timeout
        return wait_for_presence(self.session.driver, spec, context, timeout)

    def scroll_search(self, spec: LocatorSpec, context: Any = None) -> PresenceResult:
        """Swipe to reveal ``spec``; on success return its elements."""
        if self.scroller.search(spec, context):
            return self.attempt(spec, context, timeout=0)
        return PresenceResult.failure(
            TransientUIInstability(f"{spec} not visible after {self.scroller.max_attempts} swipe(s)")
        )

    def locate(self, spec: LocatorSpec, context: Any = None) -> PresenceResult:
        """Direct attempt followed by scroll search; never heals."""
        result = self.attempt(spec, context)
        if result:
            self.logger.debug("Element found directly: %s", spec)
            return result
        self.logger.info("Element not found directly, scrolling: %s", spec)
        return self.scroll_search(spec, context)

    def request_candidates(self, specs: Sequence[LocatorSpec]) -> List[str]:
        """Ask the model for corrections of ``specs`` against a fresh snapshot.

        Returns the extracted candidate strings in response order.  A
        failed request or a response without usable lines yields an
        empty list.
        """
        snapshot = self.session.snapshots.capture_snapshot()
        prompt = self.prompt_builder.build([spec.describe() for spec in specs], snapshot)
        try:
            response = self.session.llm.complete(prompt)
            candidates = self.interpreter.interpret(response)
            if not candidates:
                raise NoCandidateProduced(f"No locator in model response: {response!r}")
        except (HealRequestFailed, NoCandidateProduced) as exc:
            self.logger.warning("Healing request produced no candidate: %s", exc)
            return []
        self.logger.info("Model proposed %s candidate(s): %s", len(candidates), candidates)
        return candidates

    def _first_parseable(self, candidates: Sequence[str]) -> Optional[LocatorSpec]:
        if not candidates:
            return None
        try:
            return LocatorSpec.parse(candidates[0], source=HEALED)
        except ValueError as exc:
            self.logger.warning("First candidate %r is not a usable locator: %s", candidates[0], exc)
            return None


class LocatorHandle:
    """A locator bound to an orchestrator, usable wherever elements are looked up.

    Example::

        login = session.locator(LocatorSpec.id("com.example:id/login"))
        login.find_element().click()
    """

    def __init__(self, spec: LocatorSpec, orchestrator: HealingOrchestrator) -> None:
        self.spec = spec
        self.orchestrator = orchestrator

    def find_element(self, context: Any = None) -> Any:
        return self.orchestrator.resolve(self.spec, context)

    def find_elements(self, context: Any = None) -> List[Any]:
        return self.orchestrator.resolve_all(self.spec, context)

    @property
    def healed_spec(self) -> Optional[LocatorSpec]:
        """The healed locator currently cached for this handle, if any."""
        return self.orchestrator.session.cache.get(self.spec.signature)

    def __repr__(self) -> str:
        return f"LocatorHandle({self.spec.signature})"


__all__ = ["HealingOrchestrator", "LocatorHandle"]
