"""
LLM Judge — the AI-judgment collaborator.

Wraps an LLMProvider with the medical-advertising review prompt and turns
each reply into an AIAnalysisResult. Replies without a usable JSON object
become a neutral fallback instead of raising; transport errors propagate.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from medcheck.errors import JudgmentParseError
from medcheck.judgment import coerce_judgment, fallback_judgment
from medcheck.llm import LLMProvider
from medcheck.models import AIAnalysisResult

logger = logging.getLogger(__name__)


# ============================================================
# PROMPTS
# ============================================================

JUDGE_SYSTEM_PROMPT = """당신은 한국 의료법에 정통한 의료광고 심의 전문가입니다.
의료광고 텍스트를 분석하여 의료법 제56조 및 관련 규정 위반 여부를 판단합니다.

주요 위반 유형:
1. 치료효과 보장 (예: "100% 완치", "반드시 효과")
2. 부작용 부정/축소 (예: "부작용 전혀 없음")
3. 최상급/과장 표현 (예: "최고", "유일", "독보적")
4. 비교광고 (다른 의료기관 비하)
5. 환자 유인 (과도한 할인, 무료 제공)
6. 체험기/전후사진 부적절 사용

애매한 표현도 맥락을 고려하여 판단하세요:
- "많은 분들이 효과를 보셨습니다" → 암시적 효과 보장
- "자연스러운 결과" → 맥락에 따라 다름

응답 형식 (JSON):
{
  "isViolation": boolean,
  "confidence": 0.0-1.0,
  "violationType": "위반 유형 (없으면 null)",
  "reasoning": "판단 근거 설명",
  "suggestion": "개선 제안 (위반 시)",
  "legalReference": "관련 법령 조항"
}"""

JUDGE_PROMPT_WITH_CONTEXT = """다음 의료광고 텍스트를 분석해주세요.

맥락: {context}

텍스트:
{text}"""

JUDGE_PROMPT = """다음 의료광고 텍스트를 분석해주세요.

텍스트:
{text}"""

JUDGE_TEMPERATURE = 0.2


class LLMJudge:
    """Judges one phrase at a time through an LLMProvider."""

    def __init__(self, provider: LLMProvider):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @staticmethod
    def build_prompt(text: str, context: Optional[str] = None) -> str:
        if context:
            return JUDGE_PROMPT_WITH_CONTEXT.format(context=context, text=text)
        return JUDGE_PROMPT.format(text=text)

    async def judge(self, text: str, context: Optional[str] = None) -> AIAnalysisResult:
        try:
            data = await self._provider.generate_json(
                prompt=self.build_prompt(text, context),
                system_instruction=JUDGE_SYSTEM_PROMPT,
                temperature=JUDGE_TEMPERATURE,
            )
        except JudgmentParseError as e:
            logger.warning("Unparseable AI reply, using fallback: %s", e)
            return fallback_judgment(e.raw)
        return coerce_judgment(data)

    async def judge_batch(
        self, items: Iterable[tuple[str, Optional[str]]],
    ) -> list[AIAnalysisResult]:
        """Judge (text, context) pairs in order. A failed item yields a zero-confidence result."""
        results: list[AIAnalysisResult] = []
        for text, context in items:
            try:
                results.append(await self.judge(text, context))
            except Exception as e:
                logger.warning("Batch judgment failed for %r: %s", text, e)
                results.append(AIAnalysisResult(
                    is_violation=False,
                    confidence=0.0,
                    reasoning=f"analysis failed: {e}",
                ))
        return results
