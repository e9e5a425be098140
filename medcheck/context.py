"""
Context Validator — per-match confidence adjustment.

A rule hit like "효과" means little on its own. The same phrase inside a
sentence that also says "개인 차이가 있을 수 있습니다" is much weaker
than one that says "100% 확실한 효과를 보장합니다". This module reads the
sentence around each PatternMatch and returns a signed adjustment:

  Mitigating (whole text unless noted)
    disclaimer              -0.15
    objective evidence      -0.10
    conditional language    -0.10   (sentence only)

  Aggravating (sentence only)
    absolute certainty      +0.20
    guarantee / promise     +0.15
    no side effects         +0.15

The sum is bounded to [-0.45, +0.50].
"""

from __future__ import annotations

from typing import Optional

from medcheck.catalogs import (
    ADJUSTMENT_CEILING,
    ADJUSTMENT_FLOOR,
    AGGRAVATING_SIGNALS,
    CONDITIONAL_SIGNALS,
    CONDITIONAL_WEIGHT,
    DISCLAIMER_SIGNALS,
    DISCLAIMER_WEIGHT,
    EVIDENCE_SIGNALS,
    EVIDENCE_WEIGHT,
    LIKELY_VIOLATION_THRESHOLD,
    SENTENCE_TERMINATORS,
    SignalPattern,
)
from medcheck.models import ContextValidation, PatternMatch, clamp

_SIGNAL_NAMES = {
    "disclaimer": "disclaimer",
    "evidence": "objective evidence",
    "conditional": "conditional language",
    "absolute_certainty": "absolute certainty",
    "guarantee_promise": "guarantee language",
    "no_side_effect": "safety claim",
}


def find_sentence_start(text: str, position: int) -> int:
    """Index just after the nearest terminator before position, or 0."""
    position = min(max(position, 0), len(text))
    for i in range(position - 1, -1, -1):
        if text[i] in SENTENCE_TERMINATORS:
            return i + 1
    return 0


def find_sentence_end(text: str, position: int) -> int:
    """Index just after the nearest terminator at or after position, or len(text)."""
    position = min(max(position, 0), len(text))
    for i in range(position, len(text)):
        if text[i] in SENTENCE_TERMINATORS:
            return i + 1
    return len(text)


def extract_sentence(text: str, match: PatternMatch) -> str:
    start = find_sentence_start(text, match.position)
    end = find_sentence_end(text, match.end_position)
    return text[start:end]


def _first_hit(catalog: tuple[SignalPattern, ...], text: str) -> Optional[str]:
    for signal in catalog:
        m = signal.search(text)
        if m:
            return m.group(0)
    return None


class ContextValidator:

    def validate(self, text: str, match: PatternMatch) -> ContextValidation:
        sentence = extract_sentence(text, match)

        disclaimer = _first_hit(DISCLAIMER_SIGNALS, text)
        has_disclaimer = disclaimer is not None
        has_evidence = _first_hit(EVIDENCE_SIGNALS, text) is not None
        is_conditional = _first_hit(CONDITIONAL_SIGNALS, sentence) is not None

        fired: list[str] = []
        adjustment = 0.0
        if has_disclaimer:
            adjustment += DISCLAIMER_WEIGHT
            fired.append("disclaimer")
        if has_evidence:
            adjustment += EVIDENCE_WEIGHT
            fired.append("evidence")
        if is_conditional:
            adjustment += CONDITIONAL_WEIGHT
            fired.append("conditional")
        for signal in AGGRAVATING_SIGNALS:
            if signal.search(sentence):
                adjustment += signal.weight
                fired.append(signal.label)

        adjustment = round(clamp(adjustment, ADJUSTMENT_FLOOR, ADJUSTMENT_CEILING), 2)
        adjusted = round(match.confidence + adjustment, 4)
        is_likely = adjusted >= LIKELY_VIOLATION_THRESHOLD

        return ContextValidation(
            is_likely_violation=is_likely,
            reasoning=self._reasoning(is_likely, fired),
            has_disclaimer=has_disclaimer,
            disclaimer_content=disclaimer,
            has_objective_evidence=has_evidence,
            uses_conditional_language=is_conditional,
            confidence_adjustment=adjustment,
        )

    @staticmethod
    def _reasoning(is_likely: bool, fired: list[str]) -> str:
        verdict = (
            "Context indicates a likely violation"
            if is_likely
            else "Context indicates a violation is unlikely"
        )
        if not fired:
            return f"{verdict}."
        names = ", ".join(_SIGNAL_NAMES[f] for f in fired)
        return f"{verdict} (signals: {names})."


def adjusted_confidence(match: PatternMatch, validation: ContextValidation) -> float:
    """Match confidence after context adjustment, clamped to [0, 1]."""
    return round(clamp(match.confidence + validation.confidence_adjustment), 4)
