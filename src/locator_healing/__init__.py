"""
Locator Healing
===============

Self-healing element location for Appium based mobile UI tests.  When
a locator stops matching because the app changed, the engine scrolls
to look for the element and, failing that, asks a language model for a
corrected locator based on a snapshot of the current screen.  Healed
locators are cached for the rest of the test run.

Modules
-------

``locators``
    The immutable :class:`LocatorSpec` value type and its strategies.

``orchestrator``
    Single-locator resolution: cache, direct, scroll, then AI healing.

``batch``
    Validates and heals a list of locators with one model call.

``session``
    The per-run context object tying driver, cache, snapshots and model
    client together.

``prompts`` / ``response_parser``
    Building the healing prompt and reading locators out of the reply.

``driver`` / ``snapshot`` / ``llm``
    Appium driver adapter, page-source snapshots and the chat-completions
    client.
"""

from .batch import BatchReconciler
from .cache import HealingCache
from .config import Config, HealingSettings
from .exceptions import (
    BatchUnresolved,
    ElementNotFound,
    HealRequestFailed,
    LocatorHealingError,
    NoCandidateProduced,
    TransientUIInstability,
)
from .locators import LocatorSpec, Strategy
from .orchestrator import HealingOrchestrator, LocatorHandle
from .session import HealingSession

__all__ = [
    "BatchReconciler",
    "HealingCache",
    "Config",
    "HealingSettings",
    "BatchUnresolved",
    "ElementNotFound",
    "HealRequestFailed",
    "LocatorHealingError",
    "NoCandidateProduced",
    "TransientUIInstability",
    "LocatorSpec",
    "Strategy",
    "HealingOrchestrator",
    "LocatorHandle",
    "HealingSession",
]
