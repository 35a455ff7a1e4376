"""
Configuration Loader
--------------------

Settings for the healing engine come from a YAML file
(``config/config.yaml`` by default) overlaid with environment
variables, which may themselves be supplied through a ``.env`` file.
When a key exists in both places the environment variable wins: the
dotted key ``llm.api_url`` is overridden by ``LLM_API_URL``.

Environment values are always strings, so numeric and boolean settings
are read through :meth:`Config.get_int`, :meth:`Config.get_float` and
:meth:`Config.get_bool`, which convert both sources the same way.

:class:`HealingSettings` turns the ``healing`` section into typed
values with the engine's defaults, so the rest of the package never
reads raw configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from dotenv import load_dotenv

from .utils.logger import get_logger

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "config.yaml"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def env_key(dotted_key: str) -> str:
    """Environment variable overriding ``dotted_key`` (``llm.model`` -> ``LLM_MODEL``)."""
    return dotted_key.upper().replace(".", "_")


class Config:
    """Healing engine settings from YAML, overridable per key from the environment."""

    def __init__(self, yaml_path: Optional[str] = None, data: Optional[dict] = None) -> None:
        load_dotenv()
        self.logger = get_logger(__name__)
        self.yaml_path = Path(yaml_path) if yaml_path else DEFAULT_CONFIG_PATH
        self.data: dict = data if data is not None else self._load(self.yaml_path)

    def _load(self, path: Path) -> dict:
        if not path.exists():
            self.logger.warning("Configuration file %s not found, using defaults", path)
            return {}
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path} must hold a mapping at the top level")
        self.logger.debug("Loaded configuration from %s", path)
        return loaded

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Return the raw value for ``dotted_key`` (e.g. ``healing.scroll.delta``)."""
        env_val = os.getenv(env_key(dotted_key))
        if env_val is not None:
            return env_val
        current: Any = self.data
        for part in dotted_key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def _typed(self, dotted_key: str, default: Any, convert: Callable[[Any], Any]) -> Any:
        value = self.get(dotted_key)
        if value is None:
            return default
        try:
            return convert(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value for {dotted_key}: {value!r}") from exc

    def get_int(self, dotted_key: str, default: int) -> int:
        return self._typed(dotted_key, default, int)

    def get_float(self, dotted_key: str, default: Optional[float]) -> Optional[float]:
        return self._typed(dotted_key, default, float)

    def get_bool(self, dotted_key: str, default: bool) -> bool:
        return self._typed(dotted_key, default, _to_bool)

    def require(self, dotted_key: str) -> Any:
        """Return ``dotted_key`` or raise ``ValueError`` naming where to set it."""
        value = self.get(dotted_key)
        if value is None or value == "":
            self.logger.error("Missing required configuration value: %s", dotted_key)
            raise ValueError(
                f"{dotted_key} must be configured (in {self.yaml_path.name} or via {env_key(dotted_key)})"
            )
        return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass(frozen=True)
class HealingSettings:
    """Timing and budget knobs for resolution and healing."""

    visibility_timeout: float = 10.0
    poll_interval: float = 0.5
    scroll_attempts: int = 5
    scroll_direction: str = "down"
    scroll_delta: int = 350
    swipe_duration_ms: int = 500
    stability_interval: float = 0.5
    stability_max_polls: int = 5

    @classmethod
    def from_config(cls, config: Config) -> "HealingSettings":
        defaults = cls()
        return cls(
            visibility_timeout=config.get_float("healing.visibility_timeout", defaults.visibility_timeout),
            poll_interval=config.get_float("healing.poll_interval", defaults.poll_interval),
            scroll_attempts=config.get_int("healing.scroll.max_attempts", defaults.scroll_attempts),
            scroll_direction=str(config.get("healing.scroll.direction", defaults.scroll_direction)).lower(),
            scroll_delta=config.get_int("healing.scroll.delta", defaults.scroll_delta),
            swipe_duration_ms=config.get_int("healing.scroll.swipe_duration_ms", defaults.swipe_duration_ms),
            stability_interval=config.get_float("healing.stability.interval", defaults.stability_interval),
            stability_max_polls=config.get_int("healing.stability.max_polls", defaults.stability_max_polls),
        )


__all__ = ["Config", "HealingSettings", "env_key"]
