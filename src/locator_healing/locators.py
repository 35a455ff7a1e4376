"""
Locator Model
-------------

A :class:`LocatorSpec` is an immutable ``(strategy, value)`` pair plus a
tag recording whether it was authored in a test (``original``) or
produced by the healing pipeline (``healed``).  Specs are plain values:
they know how to render themselves for the driver (:meth:`as_by`), for
the language model (:meth:`describe`) and for the healing cache
(:attr:`signature`), but they never talk to a device themselves.

Example::

    login = LocatorSpec.xpath("//android.widget.Button[@text='Login']")
    login.signature   # "By.xpath: //android.widget.Button[@text='Login']"
    LocatorSpec.parse('By.id("com.example:id/login")')
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple


class Strategy(Enum):
    """Locator strategies; values are the WebDriver ``by`` strings."""

    XPATH = "xpath"
    ID = "id"
    NAME = "name"
    CSS_SELECTOR = "css selector"
    CLASS_NAME = "class name"
    TAG_NAME = "tag name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    ACCESSIBILITY_ID = "accessibility id"
    IOS_CLASS_CHAIN = "-ios class chain"
    IOS_PREDICATE = "-ios predicate string"
    ANDROID_UIAUTOMATOR = "-android uiautomator"

    @property
    def call_name(self) -> str:
        """Name used in ``By.<name>`` renderings, e.g. ``cssSelector``."""
        return _CALL_NAMES[self]


_CALL_NAMES = {
    Strategy.XPATH: "xpath",
    Strategy.ID: "id",
    Strategy.NAME: "name",
    Strategy.CSS_SELECTOR: "cssSelector",
    Strategy.CLASS_NAME: "className",
    Strategy.TAG_NAME: "tagName",
    Strategy.LINK_TEXT: "linkText",
    Strategy.PARTIAL_LINK_TEXT: "partialLinkText",
    Strategy.ACCESSIBILITY_ID: "accessibilityId",
    Strategy.IOS_CLASS_CHAIN: "iOSClassChain",
    Strategy.IOS_PREDICATE: "iOSNsPredicateString",
    Strategy.ANDROID_UIAUTOMATOR: "androidUIAutomator",
}

# Keys are lower-cased with underscores removed so that both Java style
# (cssSelector) and Python style (CSS_SELECTOR) names resolve.
_STRATEGY_BY_CALL_NAME = {name.lower(): strategy for strategy, name in _CALL_NAMES.items()}
_STRATEGY_BY_CALL_NAME.update({strategy.name.lower().replace("_", ""): strategy for strategy in Strategy})

_STRATEGY_CALL = re.compile(r"""^(?:Appium)?By\.(\w+)\s*\(\s*(["'])(.*)\2\s*\)\s*;?$""", re.DOTALL)
_STRATEGY_CONSTANT = re.compile(r"""^(?:Appium)?By\.(\w+)\s*[:,]\s*(.+)$""", re.DOTALL)

ORIGINAL = "original"
HEALED = "healed"


def _strategy_for(name: str) -> Optional[Strategy]:
    return _STRATEGY_BY_CALL_NAME.get(name.lower().replace("_", ""))


@dataclass(frozen=True)
class LocatorSpec:
    """Immutable locator descriptor."""

    strategy: Strategy
    value: str
    source: str = ORIGINAL

    def __post_init__(self) -> None:
        if not isinstance(self.strategy, Strategy):
            raise TypeError(f"strategy must be a Strategy, got {self.strategy!r}")
        if not self.value or not self.value.strip():
            raise ValueError("Locator value must not be empty")
        if self.source not in (ORIGINAL, HEALED):
            raise ValueError(f"Unknown locator source: {self.source}")

    # Factories ----------------------------------------------------------
    @classmethod
    def xpath(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.XPATH, value)

    @classmethod
    def id(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.ID, value)

    @classmethod
    def name(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.NAME, value)

    @classmethod
    def css_selector(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.CSS_SELECTOR, value)

    @classmethod
    def class_name(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.CLASS_NAME, value)

    @classmethod
    def tag_name(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.TAG_NAME, value)

    @classmethod
    def link_text(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.LINK_TEXT, value)

    @classmethod
    def partial_link_text(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.PARTIAL_LINK_TEXT, value)

    @classmethod
    def accessibility_id(cls, value: str) -> "LocatorSpec":
        return cls(Strategy.ACCESSIBILITY_ID, value)

    @classmethod
    def parse(cls, text: str, source: str = ORIGINAL) -> "LocatorSpec":
        """Build a spec from a path expression or a ``By.<strategy>`` rendering.

        Accepted forms are a raw path expression (``//a``, ``(//a)[2]``,
        ``./b``), a strategy call (``By.id("login")``) and the driver's
        own ``toString`` form (``By.id: login``).  Escaped quotes inside
        a strategy call are unescaped, so ``parse(spec.describe())``
        gives back ``spec``.  Raises ``ValueError`` for anything else.
        """
        text = text.strip()
        if text.startswith(("/", "(", "./")):
            return cls(Strategy.XPATH, text, source)
        match = _STRATEGY_CALL.match(text)
        if match:
            quote = match.group(2)
            value = match.group(3).replace("\\" + quote, quote)
        else:
            match = _STRATEGY_CONSTANT.match(text)
            if not match:
                raise ValueError(f"Not a recognised locator: {text!r}")
            value = match.group(2)
        strategy = _strategy_for(match.group(1))
        if strategy is None:
            raise ValueError(f"Unknown locator strategy in {text!r}")
        return cls(strategy, value.strip(), source)

    # Renderings ---------------------------------------------------------
    @property
    def signature(self) -> str:
        """Cache key; identical for specs sharing strategy and value."""
        return f"By.{self.strategy.call_name}: {self.value.strip()}"

    def as_by(self) -> Tuple[str, str]:
        """Return the ``(by, value)`` pair accepted by ``find_elements``."""
        return self.strategy.value, self.value

    def describe(self) -> str:
        """Render the spec the way the model is shown damaged locators."""
        if self.strategy is Strategy.XPATH:
            return self.value.strip()
        escaped = self.value.replace('"', '\\"')
        return f'By.{self.strategy.call_name}("{escaped}")'

    def healed(self) -> "LocatorSpec":
        return replace(self, source=HEALED)

    @property
    def is_healed(self) -> bool:
        return self.source == HEALED

    def __str__(self) -> str:
        return self.signature


__all__ = ["Strategy", "LocatorSpec", "ORIGINAL", "HEALED"]
