"""
LLM Integration
---------------

Clients for the language model that proposes healed locators.
"""

from .client import ChatCompletionsClient, LLMClient

__all__ = ["ChatCompletionsClient", "LLMClient"]
