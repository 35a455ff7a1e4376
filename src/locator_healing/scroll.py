"""
Scroll Search
-------------

Off-screen elements are invisible to a plain presence check on most
mobile platforms, so before asking the model for help the engine
drags the viewport a few times and looks again.  A swipe is a single
touch drag from the centre of the window to ``delta`` pixels away along
the chosen axis, performed with W3C pointer actions.

The search is bounded by ``max_attempts`` swipes.  A swipe the driver
rejects is logged and counted as a fruitless attempt; it is never
raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.pointer_input import PointerInput

from .locators import LocatorSpec
from .utils.logger import get_logger
from .utils.wait_utils import wait_for_screen_stable


class SwipeDirection(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: Any) -> "SwipeDirection":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


def swipe_endpoints(width: int, height: int, direction: SwipeDirection, delta: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """Return the start and end points of a swipe from the window centre."""
    start_x, start_y = width // 2, height // 2
    end_x, end_y = start_x, start_y
    if direction is SwipeDirection.UP:
        end_y = start_y - delta
    elif direction is SwipeDirection.DOWN:
        end_y = start_y + delta
    elif direction is SwipeDirection.LEFT:
        end_x = start_x - delta
    else:
        end_x = start_x + delta
    return (start_x, start_y), (end_x, end_y)


class ScrollSearch:
    """Swipe the viewport until a locator becomes visible or the budget runs out."""

    def __init__(
        self,
        driver: Any,
        direction: SwipeDirection = SwipeDirection.DOWN,
        delta: int = 350,
        max_attempts: int = 5,
        swipe_duration_ms: int = 500,
        stability_interval: float = 0.5,
        stability_max_polls: int = 5,
    ) -> None:
        self.driver = driver
        self.direction = SwipeDirection.parse(direction)
        self.delta = delta
        self.max_attempts = max_attempts
        self.swipe_duration_ms = swipe_duration_ms
        self.stability_interval = stability_interval
        self.stability_max_polls = stability_max_polls
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_settings(cls, driver: Any, settings: Any) -> "ScrollSearch":
        return cls(
            driver,
            direction=SwipeDirection.parse(settings.scroll_direction),
            delta=settings.scroll_delta,
            max_attempts=settings.scroll_attempts,
            swipe_duration_ms=settings.swipe_duration_ms,
            stability_interval=settings.stability_interval,
            stability_max_polls=settings.stability_max_polls,
        )

    def swipe(self) -> bool:
        """Perform one swipe; return ``False`` if the driver rejected it."""
        try:
            size = self.driver.window_size()
            start, end = swipe_endpoints(size["width"], size["height"], self.direction, self.delta)
            actions = ActionChains(self.driver.raw)
            actions.w3c_actions = ActionBuilder(
                self.driver.raw,
                mouse=PointerInput(interaction.POINTER_TOUCH, "finger"),
                duration=self.swipe_duration_ms,
            )
            actions.w3c_actions.pointer_action.move_to_location(*start)
            actions.w3c_actions.pointer_action.pointer_down()
            actions.w3c_actions.pointer_action.move_to_location(*end)
            actions.w3c_actions.pointer_action.release()
            actions.perform()
        except WebDriverException as exc:
            self.logger.warning("Swipe %s failed: %s", self.direction.value, exc)
            return False
        return True

    def search(self, spec: LocatorSpec, context: Any = None) -> bool:
        """Swipe up to ``max_attempts`` times, checking for ``spec`` after each swipe."""
        for attempt in range(1, self.max_attempts + 1):
            if not self.swipe():
                continue
            wait_for_screen_stable(self.driver, self.stability_interval, self.stability_max_polls)
            if self.driver.is_displayed(spec, context):
                self.logger.info("Found %s after %s swipe(s) %s", spec, attempt, self.direction.value)
                return True
        self.logger.info("%s not found after %s swipe(s) %s", spec, self.max_attempts, self.direction.value)
        return False


__all__ = ["SwipeDirection", "ScrollSearch", "swipe_endpoints"]
