"""
LLM providers.
"""

from pollinet_kb.providers.base import LLMProvider, LLMResponse
from pollinet_kb.providers.openai import OpenAIProvider

__all__ = ["LLMProvider", "LLMResponse", "OpenAIProvider"]
