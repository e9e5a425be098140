"""
AI Judgment — candidate selection and sequential AI review.

Two steps sit between the deterministic layer and the AI judge:

  1. select_targets: pick a bounded set of candidates — rule matches the
     engine is unsure about, then ambiguous phrases the engine missed.
  2. AIJudgmentIntegrator: ask the judge about each candidate, one call
     at a time, and turn confident "violation" verdicts into new
     ViolationResults.

AI failures never escalate. A failed call drops that one candidate; a
malformed reply becomes a neutral fallback judgment.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol, Sequence

from pydantic import ValidationError

from medcheck.catalogs import MEDICAL_SERVICE_ACT, lookup_violation_type
from medcheck.errors import JudgmentParseError
from medcheck.models import (
    AIAnalysisResult,
    AIAnalysisTarget,
    AIJudgment,
    LegalBasis,
    PatternMatch,
    Severity,
    ViolationResult,
    ViolationStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_MAX_TARGETS = 5

# Thresholds applied to AI verdicts
ACCEPT_CONFIDENCE = 0.7
VIOLATION_CONFIDENCE = 0.85
HIGH_SEVERITY_CONFIDENCE = 0.9

FALLBACK_CONFIDENCE = 0.5

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class AIJudgeClient(Protocol):
    """The external AI-judgment collaborator."""

    async def judge(self, text: str, context: Optional[str] = None) -> Any:
        """Return an AIAnalysisResult, a dict of its fields, or the raw reply text."""
        ...


# ============================================================
# RESPONSE PARSING
# ============================================================

def parse_judgment_strict(raw: str) -> AIAnalysisResult:
    """Parse the first JSON object found in an LLM reply. Raises JudgmentParseError."""
    m = _JSON_OBJECT.search(raw or "")
    if not m:
        raise JudgmentParseError("No JSON object in AI reply", raw=raw or "")
    try:
        data = json.loads(m.group(0))
        if not isinstance(data, dict):
            raise JudgmentParseError("AI reply JSON is not an object", raw=raw)
        return AIAnalysisResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as e:
        raise JudgmentParseError(f"Invalid AI reply: {e}", raw=raw) from e


def fallback_judgment(raw: str) -> AIAnalysisResult:
    return AIAnalysisResult(
        is_violation=False,
        confidence=FALLBACK_CONFIDENCE,
        reasoning=raw,
    )


def coerce_judgment(response: Any) -> AIAnalysisResult:
    """
    Normalize whatever the judge returned into an AIAnalysisResult.

    Never raises: anything unparseable becomes the neutral fallback
    {is_violation: False, confidence: 0.5, reasoning: <raw text>}.
    """
    if isinstance(response, AIAnalysisResult):
        return response
    if isinstance(response, dict):
        try:
            return AIAnalysisResult.model_validate(response)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Malformed AI judgment object: %s", e)
            return fallback_judgment(json.dumps(response, ensure_ascii=False, default=str))
    raw = response if isinstance(response, str) else str(response)
    try:
        return parse_judgment_strict(raw)
    except JudgmentParseError as e:
        logger.warning("Unparseable AI reply, using fallback: %s", e)
        return fallback_judgment(raw)


# ============================================================
# CANDIDATE SELECTION
# ============================================================

def select_targets(
    pattern_matches: Iterable[PatternMatch],
    ambiguous_targets: Sequence[AIAnalysisTarget],
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    cap: int = DEFAULT_MAX_TARGETS,
) -> list[AIAnalysisTarget]:
    """
    Low-confidence rule matches first, then ambiguous hits, truncated to cap.

    Matches at or above confidence_threshold never reach the AI.
    """
    low_confidence = [
        AIAnalysisTarget(
            text=m.matched_text,
            context=m.context,
            reason=f"low confidence ({m.confidence * 100:.0f}%)",
            pattern_match=m,
        )
        for m in pattern_matches
        if m.confidence < confidence_threshold
    ]
    return (low_confidence + list(ambiguous_targets))[:max(cap, 0)]


class AIDispatchFilter:
    """select_targets with the threshold and cap bound once per module."""

    def __init__(
        self,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        cap: int = DEFAULT_MAX_TARGETS,
    ):
        self.confidence_threshold = confidence_threshold
        self.cap = cap

    def select_targets(
        self,
        pattern_matches: Iterable[PatternMatch],
        ambiguous_targets: Sequence[AIAnalysisTarget],
    ) -> list[AIAnalysisTarget]:
        return select_targets(
            pattern_matches, ambiguous_targets,
            confidence_threshold=self.confidence_threshold, cap=self.cap,
        )


# ============================================================
# INTEGRATION
# ============================================================

@dataclass
class IntegrationResult:
    judgments: list[AIJudgment] = field(default_factory=list)
    new_violations: list[ViolationResult] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.judgments)


class AIJudgmentIntegrator:
    """Runs the AI judge over candidates strictly one at a time."""

    async def integrate(
        self,
        targets: Sequence[AIAnalysisTarget],
        ai_client: AIJudgeClient,
        pattern_matches: Sequence[PatternMatch] = (),
    ) -> IntegrationResult:
        result = IntegrationResult()
        known_texts = {m.matched_text for m in pattern_matches}

        for target in targets:
            try:
                response = await ai_client.judge(target.text, target.context)
            except Exception as e:
                logger.warning(
                    "AI judgment failed for %r: %s", target.text, e,
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
                continue

            judgment = coerce_judgment(response)
            result.judgments.append(AIJudgment(target=target, result=judgment))

            if target.text in known_texts:
                continue
            violation = self.to_violation(target, judgment)
            if violation is not None:
                result.new_violations.append(violation)

        logger.debug(
            "AI review complete: %d/%d judged, %d new violations",
            result.call_count, len(targets), len(result.new_violations),
            extra={"targets_count": len(targets),
                   "violations_count": len(result.new_violations)},
        )
        return result

    @staticmethod
    def to_violation(
        target: AIAnalysisTarget, judgment: AIAnalysisResult,
    ) -> Optional[ViolationResult]:
        """Accepted verdicts only: is_violation and confidence >= 0.7."""
        if not judgment.is_violation or judgment.confidence < ACCEPT_CONFIDENCE:
            return None

        legal_basis = []
        if judgment.legal_reference:
            legal_basis.append(LegalBasis(
                law=MEDICAL_SERVICE_ACT,
                article=judgment.legal_reference,
                description=judgment.reasoning,
            ))

        return ViolationResult(
            type=lookup_violation_type(judgment.violation_type),
            status=(
                ViolationStatus.VIOLATION
                if judgment.confidence >= VIOLATION_CONFIDENCE
                else ViolationStatus.LIKELY
            ),
            severity=(
                Severity.HIGH
                if judgment.confidence >= HIGH_SEVERITY_CONFIDENCE
                else Severity.MEDIUM
            ),
            matched_text=target.text,
            description=judgment.reasoning,
            legal_basis=legal_basis,
            confidence=judgment.confidence,
            suggestion=judgment.suggestion,
            source="ai",
        )
