"""
Response Interpreter
--------------------

Turns free-form model output into candidate locators.  Models often
wrap their answer in a fenced code block, add commentary, or offer
alternatives joined with ``|``.  The interpreter keeps only lines that
look like locators and only the first alternative on each line.

An empty result is a normal outcome: the model had nothing usable to
say, and the caller keeps its original locator.
"""

from __future__ import annotations

import re
from typing import List

from .locators import HEALED, LocatorSpec
from .utils.logger import get_logger


logger = get_logger(__name__)

LOCATOR_PREFIXES = ("/", "(/", "./", "By.", "AppiumBy.")
ALTERNATIVE_SEPARATOR = "|"

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*")
_FENCE_CLOSE = re.compile(r"```$")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def strip_fences(response: str) -> str:
    """Remove one leading code-fence opener and one trailing closer."""
    text = response.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text.rstrip(), count=1)
    return text.strip()


def is_locator_line(line: str) -> bool:
    return line.startswith(LOCATOR_PREFIXES)


def interpret(response: str) -> List[str]:
    """Return the candidate locators found in ``response``, in order."""
    if not response:
        return []
    candidates: List[str] = []
    for raw_line in _LINE_BREAK.split(strip_fences(response)):
        line = raw_line.strip()
        if not line or not is_locator_line(line):
            continue
        candidate = line.split(ALTERNATIVE_SEPARATOR, 1)[0].strip()
        if candidate:
            candidates.append(candidate)
            logger.debug("Extracted candidate locator: %s", candidate)
    if not candidates:
        logger.info("Model response contained no usable locator")
    return candidates


def interpret_locators(response: str) -> List[LocatorSpec]:
    """Like :func:`interpret`, but parsed into healed :class:`LocatorSpec` objects.

    Candidates that look like locators but cannot be parsed (for
    example ``By.unknown("x")``) are skipped.
    """
    specs: List[LocatorSpec] = []
    for candidate in interpret(response):
        try:
            specs.append(LocatorSpec.parse(candidate, source=HEALED))
        except ValueError as exc:
            logger.warning("Discarding candidate %r: %s", candidate, exc)
    return specs


class ResponseInterpreter:
    """Object form of :func:`interpret` for injection into the orchestrator."""

    def interpret(self, response: str) -> List[str]:
        return interpret(response)

    def interpret_locators(self, response: str) -> List[LocatorSpec]:
        return interpret_locators(response)


__all__ = ["ResponseInterpreter", "interpret", "interpret_locators", "strip_fences"]
