"""
Gemini Provider — Google Gemini API implementation.

Uses the google.genai SDK. The client is lazily initialized, so the
engine loads without an API key and only fails on an actual AI call.

One attempt per call. Failures propagate to the judgment layer, which
skips that candidate; retrying is left to callers outside the engine.
"""

from __future__ import annotations

from typing import Optional

from google import genai
from google.genai import types

from medcheck.llm import LLMProvider


DEFAULT_MODEL = "gemini-2.5-flash"
MAX_OUTPUT_TOKENS = 1024


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider."""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self._api_key = api_key or ""
        self._model = model or DEFAULT_MODEL
        self._client: Optional[genai.Client] = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError(
                    "GEMINI_API_KEY not set. Get one from "
                    "https://aistudio.google.com/apikey"
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.3,
        json_mode: bool = False,
    ) -> str:
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )
        if json_mode:
            config.response_mime_type = "application/json"

        response = await self._get_client().aio.models.generate_content(
            model=self._model,
            contents=prompt,
            config=config,
        )
        return response.text or ""
