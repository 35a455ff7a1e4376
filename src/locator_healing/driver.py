"""
Driver Adapter
--------------

Thin wrapper around an Appium (or any Selenium) WebDriver exposing just
what the healing engine needs: a bounded presence lookup, a
non-blocking visibility probe, the window size and the page source.

Only three driver failures are part of the healing contract:
``NoSuchElementException``, ``TimeoutException`` and
``InvalidElementStateException`` (see
:data:`~locator_healing.exceptions.RECOGNIZED_FAILURES`).
Every other driver error propagates to the caller untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from appium import webdriver as appium_webdriver
from appium.options.common import AppiumOptions
from selenium.common.exceptions import StaleElementReferenceException
from selenium.webdriver.support.ui import WebDriverWait

from .exceptions import RECOGNIZED_FAILURES
from .locators import LocatorSpec
from .utils.logger import get_logger

DEFAULT_POLL_INTERVAL = 0.5


class AppiumDriverAdapter:
    """Presence checks and screen queries against a live driver session."""

    def __init__(self, driver: Any, default_timeout: float = 10.0, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.raw = driver
        self.default_timeout = default_timeout
        self.poll_interval = poll_interval
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def connect(cls, config: Any, **kwargs: Any) -> "AppiumDriverAdapter":
        """Open an Appium session described by the ``mobile`` config section."""
        server_url = config.get("mobile.server_url", "http://localhost:4723")
        capabilities: Dict[str, Any] = config.get("mobile.capabilities", {}) or {}
        options = AppiumOptions()
        options.load_capabilities(capabilities)
        logger = get_logger(cls.__name__)
        logger.info("Connecting to Appium at %s", server_url)
        driver = appium_webdriver.Remote(server_url, options=options)
        return cls(driver, **kwargs)

    def find_presence(self, spec: LocatorSpec, context: Any = None, timeout: Optional[float] = None) -> List[Any]:
        """Wait up to ``timeout`` seconds for ``spec`` to match at least one element.

        Returns the matching elements.  Raises ``TimeoutException`` when
        nothing appears in time; other recognised failures raised by the
        driver pass straight through.
        """
        search_context = context if context is not None else self.raw
        timeout = self.default_timeout if timeout is None else timeout
        by, value = spec.as_by()
        wait = WebDriverWait(search_context, timeout, poll_frequency=self.poll_interval)
        return wait.until(
            lambda ctx: ctx.find_elements(by, value),
            message=f"No element matched {spec.signature} within {timeout}s",
        )

    def is_displayed(self, spec: LocatorSpec, context: Any = None) -> bool:
        """Return ``True`` if the first element matching ``spec`` is visible now."""
        search_context = context if context is not None else self.raw
        by, value = spec.as_by()
        try:
            elements = search_context.find_elements(by, value)
            return bool(elements) and elements[0].is_displayed()
        except RECOGNIZED_FAILURES + (StaleElementReferenceException,) as exc:
            self.logger.debug("Visibility probe for %s failed: %s", spec, exc)
            return False

    def window_size(self) -> Dict[str, int]:
        size = self.raw.get_window_size()
        return {"width": int(size["width"]), "height": int(size["height"])}

    def page_source(self) -> str:
        return self.raw.page_source or ""

    def quit(self) -> None:
        if self.raw is not None:
            self.raw.quit()
            self.raw = None


__all__ = ["AppiumDriverAdapter", "RECOGNIZED_FAILURES"]
