"""
LLM Client
----------

One-shot text completion against a chat-completions endpoint.  The
healing engine only ever needs ``complete(prompt) -> text``: a single
user message in, the assistant's reply out, with no conversation state
kept between calls.

:class:`ChatCompletionsClient` talks to any OpenAI-compatible server
(vLLM, Ollama's ``/v1`` API, LM Studio, OpenAI itself) with
``requests``.  Every failure, whether a connection error, a timeout, a
non-2xx status or a body without ``choices[0].message.content``, is
raised as :class:`~locator_healing.exceptions.HealRequestFailed` so the
engine can treat it as "no candidate".
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..exceptions import HealRequestFailed
from ..utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_API_URL = "http://localhost:8000/v1/chat/completions"


class LLMClient(ABC):
    """Abstract single-turn completion client."""

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Send ``prompt`` and return the model's reply text.

        Implementations raise ``HealRequestFailed`` on any failure.
        """


class ChatCompletionsClient(LLMClient):
    """OpenAI-compatible ``/v1/chat/completions`` client."""

    def __init__(
        self,
        model: str,
        api_url: str = DEFAULT_API_URL,
        api_key: str = "EMPTY",
        connect_timeout: float = 30,
        read_timeout: float = 60,
        retries: int = 0,
        retry_delay: float = 1.0,
        temperature: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.model = model
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = (connect_timeout, read_timeout)
        self.retries = max(0, int(retries))
        self.retry_delay = retry_delay
        self.temperature = temperature
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Any) -> "ChatCompletionsClient":
        return cls(
            model=str(config.require("llm.model")),
            api_url=str(config.get("llm.api_url", DEFAULT_API_URL)),
            api_key=str(config.get("llm.api_key", "EMPTY")),
            connect_timeout=config.get_float("llm.connect_timeout", 30),
            read_timeout=config.get_float("llm.read_timeout", 60),
            retries=config.get_int("llm.retries", 0),
            retry_delay=config.get_float("llm.retry_delay", 1.0),
            temperature=config.get_float("llm.temperature", None),
        )

    def _payload(self, prompt: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload

    def _post(self, prompt: str) -> str:
        try:
            response = self.session.post(
                self.api_url,
                json=self._payload(prompt),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise HealRequestFailed(f"Request to {self.api_url} failed: {exc}") from exc
        if not response.ok:
            raise HealRequestFailed(
                f"Model endpoint returned {response.status_code}: {response.text[:500] or 'empty body'}"
            )
        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise HealRequestFailed(f"Malformed completion response: {exc}") from exc
        if not isinstance(content, str):
            raise HealRequestFailed("Completion content is not text")
        return content.strip()

    def complete(self, prompt: str) -> str:
        """Send ``prompt``, retrying up to ``retries`` more times on failure."""
        logger.debug("Sending prompt to %s:\n%s", self.model, prompt)
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                reply = self._post(prompt)
            except HealRequestFailed as exc:
                logger.warning("LLM call attempt %s/%s failed: %s", attempt, attempts, exc)
                if attempt == attempts:
                    raise
                time.sleep(self.retry_delay)
            else:
                logger.debug("Model response:\n%s", reply)
                return reply


__all__ = ["LLMClient", "ChatCompletionsClient"]
