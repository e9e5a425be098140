"""
LLM provider factory.
"""

from __future__ import annotations

from typing import Optional

from medcheck.llm import LLMProvider


def get_provider(
    provider_name: str = "gemini",
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> LLMProvider:
    """Factory — returns the configured LLM provider."""
    if provider_name == "gemini":
        from medcheck.llm.gemini import GeminiProvider
        return GeminiProvider(api_key=api_key, model=model)
    raise ValueError(f"Unknown LLM provider: {provider_name}")
