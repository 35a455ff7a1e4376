"""
Orchestrator Tests
------------------

Drive single-locator resolution through each stage against the fake
driver: direct hits, scroll hits, AI healing with cache reuse, and the
failure modes that end in ``ElementNotFound``.
"""

from concurrent.futures import ThreadPoolExecutor

import allure
import pytest
from selenium.common.exceptions import InvalidSelectorException, NoSuchElementException

from conftest import FakeLLM, FakeWebDriver
from locator_healing.cache import HealingCache
from locator_healing.config import Config
from locator_healing.exceptions import ElementNotFound, HealRequestFailed
from locator_healing.locators import LocatorSpec
from locator_healing.session import HealingSession

ORIGINAL = LocatorSpec.xpath("//android.widget.Button[@text='Login']")
HEALED_XPATH = "//android.widget.Button[@resource-id='loginBtn']"


def test_direct_hit_needs_no_scroll_or_model(session, fake_driver, fake_llm) -> None:
    element = fake_driver.show("id", "login")
    assert session.resolve(LocatorSpec.id("login")) is element
    assert fake_driver.swipe_count == 0
    assert fake_llm.prompts == []


def test_scroll_hit_needs_no_model(session, fake_driver, fake_llm) -> None:
    fake_driver.show_after_swipes("id", "footer", 3)
    element = session.resolve(LocatorSpec.id("footer"))
    assert element.name == "footer"
    assert fake_driver.swipe_count == 3
    assert fake_llm.prompts == []


def test_heal_then_reuse_from_cache(session, fake_driver, fake_llm) -> None:
    fake_driver.show("xpath", HEALED_XPATH, name="login-button")
    fake_llm.responses.append(HEALED_XPATH)

    with allure.step("First resolution heals through the model"):
        element = session.resolve(ORIGINAL)
    assert element.name == "login-button"
    assert len(fake_llm.prompts) == 1
    assert fake_driver.swipe_count == 5
    cached = session.cache.get(ORIGINAL.signature)
    assert cached == LocatorSpec.parse(HEALED_XPATH, source="healed")

    with allure.step("Second resolution is served from the cache"):
        again = session.resolve(ORIGINAL)
    assert again.name == "login-button"
    assert len(fake_llm.prompts) == 1
    assert fake_driver.swipe_count == 5


def test_prompt_describes_damaged_locator_and_snapshot(session, fake_driver, fake_llm) -> None:
    fake_driver.show("xpath", HEALED_XPATH)
    fake_llm.responses.append(f"```xpath\n{HEALED_XPATH}\n```")
    session.resolve(ORIGINAL)
    prompt = fake_llm.prompts[0]
    assert f"1. {ORIGINAL.value}" in prompt
    assert "PLATFORM: Android" in prompt
    assert "com.example:id/loginBtn" in prompt


def test_cached_miss_falls_back_to_original_without_evicting(session, fake_driver, fake_llm) -> None:
    stale = LocatorSpec.xpath("//gone").healed()
    session.cache.put(ORIGINAL.signature, stale)
    element = fake_driver.show("xpath", ORIGINAL.value)
    assert session.resolve(ORIGINAL) is element
    assert session.cache.get(ORIGINAL.signature) == stale
    assert fake_llm.prompts == []


def test_no_candidate_raises_element_not_found(session, fake_llm) -> None:
    fake_llm.responses.append("I am sorry, I cannot find that element.")
    with pytest.raises(ElementNotFound) as info:
        session.resolve(ORIGINAL)
    assert info.value.locator == ORIGINAL
    assert info.value.healed is None
    assert ORIGINAL.signature not in session.cache


def test_failed_model_request_is_treated_as_no_candidate(session, fake_llm) -> None:
    fake_llm.responses.append(HealRequestFailed("connection refused"))
    with pytest.raises(ElementNotFound):
        session.resolve(ORIGINAL)
    assert len(session.cache) == 0


def test_healed_locator_that_misses_is_reported(session, fake_llm) -> None:
    fake_llm.responses.append(HEALED_XPATH)
    with pytest.raises(ElementNotFound) as info:
        session.resolve(ORIGINAL)
    assert info.value.healed.value == HEALED_XPATH
    assert HEALED_XPATH in str(info.value)
    assert session.cache.get(ORIGINAL.signature).value == HEALED_XPATH


def test_element_not_found_is_a_selenium_no_such_element(session, fake_llm) -> None:
    fake_llm.responses.append("nothing useful")
    with pytest.raises(NoSuchElementException):
        session.resolve(ORIGINAL)


def test_unrecognised_driver_errors_propagate(session, fake_driver, fake_llm) -> None:
    fake_driver.errors[("xpath", "//bad[")] = InvalidSelectorException("bad xpath")
    with pytest.raises(InvalidSelectorException):
        session.resolve(LocatorSpec.xpath("//bad["))
    assert fake_llm.prompts == []


def test_native_strategy_candidate_is_supported(session, fake_driver, fake_llm) -> None:
    element = fake_driver.show("id", "com.example:id/loginBtn")
    fake_llm.responses.append('By.id("com.example:id/loginBtn")')
    assert session.resolve(LocatorSpec.id("com.example:id/login")) is element


def test_locator_handle_resolves_through_session(session, fake_driver) -> None:
    fake_driver.show("accessibility id", "Login")
    fake_driver.present[("accessibility id", "Login")].append(fake_driver.present[("accessibility id", "Login")][0])
    handle = session.locator(LocatorSpec.accessibility_id("Login"))
    assert handle.find_element().name == "Login"
    assert len(handle.find_elements()) == 2
    assert handle.healed_spec is None


def test_snapshot_written_for_each_heal(session, fake_driver, fake_llm, tmp_path) -> None:
    fake_driver.show("xpath", HEALED_XPATH)
    fake_llm.responses.append(HEALED_XPATH)
    session.resolve(ORIGINAL)
    written = sorted(p.name for p in (tmp_path / "snapshots").iterdir())
    assert any(name.startswith("snapshot_") and name.endswith(".xml") for name in written)
    assert any(name.startswith("xpaths_") and name.endswith(".txt") for name in written)


def test_quoted_strategy_call_candidate_heals(session, fake_driver, fake_llm) -> None:
    element = fake_driver.show("xpath", '//android.widget.Button[@text="Login"]')
    fake_llm.responses.append('By.xpath("//android.widget.Button[@text=\\"Login\\"]")')
    assert session.resolve(LocatorSpec.id("com.example:id/login")) is element
    cached = session.cache.get(LocatorSpec.id("com.example:id/login").signature)
    assert cached.value == '//android.widget.Button[@text="Login"]'


def _sibling_session(config_file, cache: HealingCache, llm: FakeLLM) -> HealingSession:
    raw = FakeWebDriver()
    raw.show("xpath", HEALED_XPATH, name="login-button")
    return HealingSession.from_config(Config(str(config_file)), driver=raw, llm=llm, cache=cache)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "healing:\n"
        "  visibility_timeout: 0\n"
        "  poll_interval: 0.001\n"
        "  stability:\n"
        "    interval: 0\n"
        f"snapshots:\n  directory: {tmp_path / 'shared_snaps'}\n  clean_on_start: false\n",
        encoding="utf-8",
    )
    return path


def test_sessions_share_a_cache_passed_to_from_config(config_file) -> None:
    shared = HealingCache()
    first_llm, second_llm = FakeLLM(HEALED_XPATH), FakeLLM()
    first = _sibling_session(config_file, shared, first_llm)
    second = _sibling_session(config_file, shared, second_llm)

    with allure.step("First session heals the locator"):
        assert first.resolve(ORIGINAL).name == "login-button"
    assert len(first_llm.prompts) == 1

    with allure.step("Second session reuses the healed locator"):
        assert second.resolve(ORIGINAL).name == "login-button"
    assert second_llm.prompts == []
    assert second.cache is first.cache


def test_parallel_resolutions_through_shared_cache(config_file) -> None:
    shared = HealingCache()
    workers = 6

    def heal(worker: int) -> str:
        original = LocatorSpec.xpath(f"//android.widget.Button[@text='Item {worker}']")
        fix = f"//android.widget.Button[@resource-id='item{worker}']"
        raw = FakeWebDriver()
        raw.show("xpath", fix, name=f"item-{worker}")
        session = HealingSession.from_config(
            Config(str(config_file)), driver=raw, llm=FakeLLM(fix), cache=shared
        )
        return session.resolve(original).name

    with ThreadPoolExecutor(max_workers=workers) as pool:
        names = list(pool.map(heal, range(workers)))

    assert names == [f"item-{worker}" for worker in range(workers)]
    assert len(shared) == workers
    for worker in range(workers):
        original = LocatorSpec.xpath(f"//android.widget.Button[@text='Item {worker}']")
        assert shared.get(original.signature).value == f"//android.widget.Button[@resource-id='item{worker}']"
