"""
Shared fixtures: a scriptable fake WebDriver and a fake model client.

The fake driver answers ``find_elements`` from a table of present
locators, records every W3C actions payload it receives, and can be
told to reveal a locator only after a number of swipes.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from locator_healing.cache import HealingCache
from locator_healing.config import HealingSettings
from locator_healing.driver import AppiumDriverAdapter
from locator_healing.exceptions import HealRequestFailed
from locator_healing.llm.client import LLMClient
from locator_healing.session import HealingSession
from locator_healing.snapshot import PageSourceSnapshotProvider

PAGE_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<hierarchy rotation="0">
  <android.widget.FrameLayout resource-id="android:id/content">
    <android.widget.LinearLayout>
      <android.widget.EditText resource-id="com.example:id/username" text="Username"/>
      <android.widget.Button resource-id="com.example:id/loginBtn" text="Sign in"/>
    </android.widget.LinearLayout>
  </android.widget.FrameLayout>
</hierarchy>"""


class FakeElement:
    def __init__(self, name: str, displayed: bool = True) -> None:
        self.name = name
        self.displayed = displayed

    def is_displayed(self) -> bool:
        return self.displayed

    def __repr__(self) -> str:
        return f"FakeElement({self.name})"


class FakeWebDriver:
    def __init__(self, page_source: str = PAGE_SOURCE) -> None:
        self.present: Dict[Tuple[str, str], List[FakeElement]] = {}
        self.reveal_after: Dict[Tuple[str, str], int] = {}
        self.errors: Dict[Tuple[str, str], Exception] = {}
        self.actions: List[Dict[str, Any]] = []
        self.swipe_error: Optional[Exception] = None
        self.lookups: List[Tuple[str, str]] = []
        self._page_source = page_source
        self.quit_called = False

    # Scripting helpers
    def show(self, by: str, value: str, name: Optional[str] = None) -> FakeElement:
        element = FakeElement(name or value)
        self.present[(by, value)] = [element]
        return element

    def show_after_swipes(self, by: str, value: str, swipes: int) -> None:
        self.reveal_after[(by, value)] = swipes

    @property
    def swipe_count(self) -> int:
        return len(self.actions)

    # WebDriver surface
    def find_elements(self, by: str, value: str) -> List[FakeElement]:
        self.lookups.append((by, value))
        if (by, value) in self.errors:
            raise self.errors[(by, value)]
        needed = self.reveal_after.get((by, value))
        if needed is not None and self.swipe_count >= needed:
            return [FakeElement(value)]
        return list(self.present.get((by, value), []))

    def get_window_size(self) -> Dict[str, int]:
        return {"width": 1080, "height": 1920}

    @property
    def page_source(self) -> str:
        return self._page_source

    def execute(self, command: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if command == "actions":
            if self.swipe_error is not None:
                raise self.swipe_error
            self.actions.append(params or {})
        return {"value": None}

    def quit(self) -> None:
        self.quit_called = True


class FakeLLM(LLMClient):
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise HealRequestFailed("no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


FAST_SETTINGS = HealingSettings(
    visibility_timeout=0,
    poll_interval=0.001,
    scroll_attempts=5,
    stability_interval=0,
    stability_max_polls=5,
)


@pytest.fixture
def fake_driver() -> FakeWebDriver:
    return FakeWebDriver()


@pytest.fixture
def adapter(fake_driver: FakeWebDriver) -> AppiumDriverAdapter:
    return AppiumDriverAdapter(fake_driver, default_timeout=0, poll_interval=0.001)


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def session(adapter: AppiumDriverAdapter, fake_llm: FakeLLM, tmp_path) -> HealingSession:
    return HealingSession(
        driver=adapter,
        llm=fake_llm,
        snapshots=PageSourceSnapshotProvider(adapter, str(tmp_path / "snapshots")),
        settings=FAST_SETTINGS,
        cache=HealingCache(),
    )
