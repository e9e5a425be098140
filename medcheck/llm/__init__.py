"""
LLM Provider — Abstract Interface

All calls to the external AI judge go through this interface. Swap
providers by changing MEDCHECK_LLM_PROVIDER in env.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Optional

from medcheck.errors import JudgmentParseError

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    name: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.3,
        json_mode: bool = False,
    ) -> str:
        """Generate a text response from the LLM."""
        ...

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.2,
    ) -> dict:
        """
        Generate a reply and return the first JSON object embedded in it.

        Fenced blocks and leading prose are tolerated. Raises
        JudgmentParseError when no object can be decoded; the raw reply
        travels on the exception.
        """
        text = await self.generate(
            prompt=prompt,
            system_instruction=system_instruction,
            temperature=temperature,
            json_mode=True,
        )
        m = _JSON_OBJECT.search(text or "")
        if not m:
            raise JudgmentParseError("No JSON object in LLM reply", text or "")
        try:
            return json.loads(m.group(0))
        except json.JSONDecodeError as e:
            raise JudgmentParseError(f"LLM returned invalid JSON: {e}", text) from e
