"""
Healing Session
---------------

Everything one test run shares: the driver, the healed-locator cache,
the snapshot provider, the model client and the timing settings.
Build one session at the start of a run and hand it to the
orchestrator and batch reconciler; nothing in the package keeps
module-level state.

Example::

    config = Config()
    session = HealingSession.from_config(config)
    login = session.locator(LocatorSpec.id("com.example:id/login"))
    login.find_element().click()
    session.close()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .batch import BatchReconciler
from .cache import HealingCache
from .config import HealingSettings
from .driver import AppiumDriverAdapter
from .llm.client import ChatCompletionsClient, LLMClient
from .locators import LocatorSpec
from .orchestrator import HealingOrchestrator, LocatorHandle
from .snapshot import PageSourceSnapshotProvider


@dataclass
class HealingSession:
    driver: AppiumDriverAdapter
    llm: LLMClient
    snapshots: Any
    settings: HealingSettings = field(default_factory=HealingSettings)
    cache: HealingCache = field(default_factory=HealingCache)
    _orchestrator: Optional[HealingOrchestrator] = field(default=None, init=False, repr=False)

    @classmethod
    def from_config(
        cls,
        config: Any,
        driver: Any = None,
        llm: Optional[LLMClient] = None,
        cache: Optional[HealingCache] = None,
    ) -> "HealingSession":
        """Assemble a session from configuration.

        ``driver`` may be a raw WebDriver, an already wrapped
        :class:`AppiumDriverAdapter`, or ``None`` to open a new Appium
        session from the ``mobile`` config section.  Pass the same
        ``cache`` to every session of a parallel run so that a locator
        healed on one device thread is reused on the others.
        """
        settings = HealingSettings.from_config(config)
        if driver is None:
            adapter = AppiumDriverAdapter.connect(
                config, default_timeout=settings.visibility_timeout, poll_interval=settings.poll_interval
            )
        elif isinstance(driver, AppiumDriverAdapter):
            adapter = driver
        else:
            adapter = AppiumDriverAdapter(driver, settings.visibility_timeout, settings.poll_interval)
        return cls(
            driver=adapter,
            llm=llm or ChatCompletionsClient.from_config(config),
            snapshots=PageSourceSnapshotProvider.from_config(adapter, config),
            settings=settings,
            cache=cache if cache is not None else HealingCache(),
        )

    @property
    def orchestrator(self) -> HealingOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = HealingOrchestrator(self)
        return self._orchestrator

    def reconciler(self) -> BatchReconciler:
        return BatchReconciler(self.orchestrator)

    def locator(self, spec: LocatorSpec) -> LocatorHandle:
        return LocatorHandle(spec, self.orchestrator)

    def resolve(self, spec: LocatorSpec, context: Any = None) -> Any:
        return self.orchestrator.resolve(spec, context)

    def close(self) -> None:
        self.driver.quit()


__all__ = ["HealingSession"]
