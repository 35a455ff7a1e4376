"""Tests for healing prompt construction and platform inference."""

import pytest

from locator_healing.locators import LocatorSpec, Strategy
from locator_healing.prompts import Platform, PromptBuilder, build_prompt, infer_platform


@pytest.mark.parametrize(
    "descriptors, expected",
    [
        (['By.id("com.example:id/loginBtn")'], Platform.ANDROID),
        (["//android.widget.Button[@text='Login']"], Platform.ANDROID),
        (["//XCUIElementTypeButton[@name='Login']"], Platform.IOS),
        (["//*[@label='Continue']"], Platform.IOS),
        (['By.id("com.example:id/loginBtn")', "//XCUIElementTypeButton[@name='Login']"], Platform.MIXED),
        (["//div[@class='login']"], Platform.MIXED),
        (['By.id("com.app:id/btn-iosstyle")'], Platform.ANDROID),
        (["By.iOSNsPredicateString(\"label == 'Login'\")"], Platform.IOS),
        (['By.iOSClassChain("**/XCUIElementTypeCell[1]")'], Platform.IOS),
        (['By.androidUIAutomator("new UiScrollable(new UiSelector())")'], Platform.ANDROID),
    ],
)
def test_platform_inference(descriptors, expected) -> None:
    assert infer_platform(descriptors) is expected


def test_platform_strategies_are_inferred_from_their_descriptions() -> None:
    predicate = LocatorSpec(Strategy.IOS_PREDICATE, "label == 'Login'")
    automator = LocatorSpec(Strategy.ANDROID_UIAUTOMATOR, 'new UiSelector().text("Login")')
    assert infer_platform([predicate.describe()]) is Platform.IOS
    assert infer_platform([automator.describe()]) is Platform.ANDROID


def test_prompt_sections_appear_in_order() -> None:
    prompt = build_prompt(['By.id("com.example:id/loginBtn")'], "<hierarchy/>")
    markers = [
        "ROLE:",
        "PLATFORM: Android",
        "MODEL LEARNING CONTEXT:",
        "TASK:",
        "1. Damaged Locators:",
        "2. Current XML Snapshot:",
        "RULES:",
        "EXAMPLE:",
    ]
    positions = [prompt.index(marker) for marker in markers]
    assert positions == sorted(positions)
    assert "analyzing damaged locators for platform: Android" in prompt


def test_damaged_locators_are_numbered_from_one() -> None:
    prompt = build_prompt(["//a", "//b", "//c"], "")
    assert "1. //a\n2. //b\n3. //c" in prompt


def test_snapshot_is_fenced_and_may_be_empty() -> None:
    prompt = build_prompt(["//a"], "<hierarchy><node/></hierarchy>")
    assert "'''\n<hierarchy><node/></hierarchy>\n'''" in prompt
    empty = build_prompt(["//a"], "")
    assert "2. Current XML Snapshot:\n'''\n\n'''" in empty


def test_rules_are_spelled_out_literally() -> None:
    prompt = build_prompt(["//a"], "")
    for rule in (
        "return EXACTLY ONE corrected locator, one per line",
        "Do NOT join multiple locators with '|'",
        "prefer an exact native locator",
        "contains(), starts-with(), normalize-space()",
        "iOS → @name, @label, @value",
        "Android → @resource-id, @content-desc, @text",
        "Preserve relationships (sibling, parent, ancestor)",
        "keep the index unchanged",
        "Be case-insensitive",
        "If the tag name changes slightly",
    ):
        assert rule in prompt


def test_example_follows_platform() -> None:
    ios_prompt = build_prompt(["//XCUIElementTypeButton[@name='Go']"], "")
    assert "//XCUIElementTypeButton[@name='loginBtn']" in ios_prompt
    mixed_prompt = build_prompt(['By.id("a")', "//XCUIElementTypeButton"], "")
    assert "PLATFORM: Android and iOS" in mixed_prompt


def test_prompt_is_deterministic() -> None:
    builder = PromptBuilder()
    args = (["//a", 'By.id("b")'], "<hierarchy/>")
    assert builder.build(*args) == builder.build(*args)


def test_prompt_requires_a_locator() -> None:
    with pytest.raises(ValueError):
        build_prompt([], "<hierarchy/>")
