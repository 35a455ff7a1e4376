"""
Prompt Builder
--------------

Builds the text sent to the language model when locators need healing.
The prompt is deterministic: the same damaged locators and snapshot
always produce the same text.  Its sections appear in a fixed order:

1. role statement
2. ``PLATFORM:`` line
3. learning context, telling the model to pick up this app's naming
   conventions from the snapshot
4. task statement
5. the damaged locators as a 1-indexed list
6. the snapshot between ``'''`` fences
7. the rules
8. one input/output example for the inferred platform

The platform only changes wording and the example.  The rules are the
same for every platform.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from .utils.logger import get_logger


logger = get_logger(__name__)


class Platform(Enum):
    IOS = "iOS"
    ANDROID = "Android"
    MIXED = "Android and iOS"


IOS_MARKERS = (
    "XCUIElementType",
    "@name",
    "@label",
    "By.name(",
    "By.accessibilityId(",
    "By.iOSClassChain(",
    "By.iOSNsPredicateString(",
)
ANDROID_MARKERS = (
    "android.widget",
    "android.view",
    "resource-id",
    "@text",
    "@content-desc",
    "By.id(",
    ":id/",
    "UiSelector",
    "By.androidUIAutomator(",
)

ROLE = "ROLE: You are an advanced automation test assistant specializing in self-healing mobile locators."

LEARNING_CONTEXT = """MODEL LEARNING CONTEXT:
- You are analyzing damaged locators for platform: {platform}.
- Learn from the XML snapshot structure below: detect how attributes are used in this app (naming conventions, casing, id patterns, etc.).
- Use this snapshot as a reference to adapt and correct locators intelligently.
- Ensure the final suggestions align with the current app's platform structure."""

TASK = (
    "TASK: Given a list of damaged locators (By.id, By.name, By.className, By.cssSelector, By.tagName, "
    "By.linkText, By.partialLinkText, By.accessibilityId, XPath, etc.) and the current XML snapshot, "
    "search inside the XML and return the most similar/corrected locator for each one."
)

RULES = """- For each damaged locator, return EXACTLY ONE corrected locator, one per line, in the same order, with no explanations, numbering or extra text.
- Do NOT join multiple locators with '|'.
- For each damaged locator (By.id, By.name, By.className, By.cssSelector, By.tagName, By.linkText, By.partialLinkText, By.accessibilityId, XPath), find the closest match in the XML snapshot.
- If the element's identifier exists verbatim in the XML snapshot, prefer an exact native locator for it (for example By.id("...") or an exact XPath attribute match).
- Otherwise, generate a corrected XPath using flexible attribute matches (contains(), starts-with(), normalize-space()).
- Prefer attributes based on platform:
  * iOS → @name, @label, @value
  * Android → @resource-id, @content-desc, @text
- Preserve relationships (sibling, parent, ancestor) if present in the damaged locator.
- Handle numbers in attribute values and node names correctly.
- If a locator contains an index (e.g., [2]), keep the index unchanged in the output.
- Be case-insensitive when matching attribute values and node names.
- Normalize spaces, tabs, or newlines in attributes before matching.
- If the tag name changes slightly (e.g., Button → TextView), still return the closest valid element type."""

EXAMPLES = {
    Platform.IOS: """Input:
By.id("loginBtn")
Output:
//XCUIElementTypeButton[@name='loginBtn']""",
    Platform.ANDROID: """Input:
By.id("com.example:id/loginBtn")
Output:
//android.widget.Button[contains(@resource-id,'loginBtn')]""",
    Platform.MIXED: """Input:
1. By.id("com.example:id/loginBtn")
2. By.className("XCUIElementTypeButton")
Output:
//android.widget.Button[contains(@resource-id,'loginBtn')]
//XCUIElementTypeButton""",
}


def infer_platform(descriptors: Sequence[str]) -> Platform:
    """Classify damaged locators as iOS, Android or a mix of both."""
    has_ios = any(marker in d for d in descriptors for marker in IOS_MARKERS)
    has_android = any(marker in d for d in descriptors for marker in ANDROID_MARKERS)
    if has_ios and not has_android:
        return Platform.IOS
    if has_android and not has_ios:
        return Platform.ANDROID
    return Platform.MIXED


def build_prompt(descriptors: Sequence[str], snapshot: str) -> str:
    """Return the healing prompt for ``descriptors`` against ``snapshot``.

    ``descriptors`` must contain at least one damaged locator; the
    snapshot may be empty.
    """
    if not descriptors:
        raise ValueError("At least one damaged locator is required to build a prompt")
    platform = infer_platform(descriptors)
    numbered = "\n".join(f"{index}. {descriptor}" for index, descriptor in enumerate(descriptors, start=1))
    sections = [
        ROLE,
        f"PLATFORM: {platform.value}",
        LEARNING_CONTEXT.format(platform=platform.value),
        "",
        TASK,
        "",
        "INPUT:",
        f"1. Damaged Locators:\n{numbered}",
        "",
        f"2. Current XML Snapshot:\n'''\n{snapshot or ''}\n'''",
        "",
        f"RULES:\n{RULES}",
        "",
        f"EXAMPLE:\n{EXAMPLES[platform]}",
    ]
    prompt = "\n".join(sections)
    logger.debug("Built %s prompt for %s damaged locator(s)", platform.value, len(descriptors))
    return prompt


class PromptBuilder:
    """Object form of :func:`build_prompt` for injection into the orchestrator."""

    def infer_platform(self, descriptors: Sequence[str]) -> Platform:
        return infer_platform(descriptors)

    def build(self, descriptors: Sequence[str], snapshot: str) -> str:
        return build_prompt(descriptors, snapshot)


__all__ = ["Platform", "PromptBuilder", "build_prompt", "infer_platform"]
