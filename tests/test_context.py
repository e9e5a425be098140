"""
Context Validator Tests

  1. Sentence extraction
  2. Mitigating signals (disclaimer, evidence, conditional language)
  3. Aggravating signals
  4. Adjustment bounds
"""

from __future__ import annotations

import pytest

from medcheck.context import (
    ContextValidator,
    adjusted_confidence,
    extract_sentence,
    find_sentence_end,
    find_sentence_start,
)
from medcheck.models import PatternMatch


def match_at(text: str, phrase: str, confidence: float = 0.7) -> PatternMatch:
    start = text.index(phrase)
    return PatternMatch(
        matched_text=phrase,
        context=text,
        confidence=confidence,
        position=start,
        end_position=start + len(phrase),
    )


# ============================================================
# SENTENCES
# ============================================================

class TestSentence:

    def test_boundaries(self):
        text = "첫 문장입니다. 둘째 문장입니다! 셋째"
        assert find_sentence_start(text, 10) == 8
        assert find_sentence_end(text, 10) == 18
        assert find_sentence_start(text, 3) == 0
        assert find_sentence_end(text, 20) == len(text)

    def test_extract(self):
        text = "많은 분들이 효과를 보셨습니다. 개인 차이가 있을 수 있습니다."
        m = match_at(text, "많은 분들이 효과")
        assert extract_sentence(text, m) == "많은 분들이 효과를 보셨습니다."

    def test_newline_terminates(self):
        text = "첫 줄\n효과 보장"
        m = match_at(text, "효과")
        assert extract_sentence(text, m) == "효과 보장"


# ============================================================
# MITIGATING
# ============================================================

class TestMitigating:

    def test_disclaimer_in_next_sentence(self):
        text = "많은 분들이 효과를 보셨습니다. 개인 차이가 있을 수 있습니다."
        m = match_at(text, "많은 분들이 효과", confidence=0.70)

        v = ContextValidator().validate(text, m)

        assert v.has_disclaimer is True
        assert v.disclaimer_content == "개인 차이"
        assert v.has_objective_evidence is False
        assert v.uses_conditional_language is False
        assert v.confidence_adjustment == pytest.approx(-0.15)
        assert adjusted_confidence(m, v) == pytest.approx(0.55)
        assert v.is_likely_violation is False
        assert "unlikely" in v.reasoning
        assert "disclaimer" in v.reasoning

    def test_evidence(self):
        text = "임상 결과 90%의 환자가 개선되었습니다."
        v = ContextValidator().validate(text, match_at(text, "개선"))
        assert v.has_objective_evidence is True
        assert v.confidence_adjustment == pytest.approx(-0.10)

    def test_conditional_only_counts_in_sentence(self):
        text = "효과가 좋습니다. 상황에 따라 다릅니다."
        v = ContextValidator().validate(text, match_at(text, "효과"))
        assert v.uses_conditional_language is False

        text = "상황에 따라 효과가 다릅니다."
        v = ContextValidator().validate(text, match_at(text, "효과"))
        assert v.uses_conditional_language is True
        assert v.confidence_adjustment == pytest.approx(-0.10)

    def test_clean_context(self):
        text = "효과를 경험해 보세요."
        v = ContextValidator().validate(text, match_at(text, "효과", confidence=0.8))
        assert v.confidence_adjustment == 0.0
        assert v.is_likely_violation is True
        assert v.reasoning == "Context indicates a likely violation."


# ============================================================
# AGGRAVATING
# ============================================================

class TestAggravating:

    def test_certainty_and_guarantee(self):
        text = "100% 완벽한 효과를 보장합니다. 부작용이 없습니다."
        m = match_at(text, "효과", confidence=0.6)
        v = ContextValidator().validate(text, m)

        # The side-effect claim sits in another sentence
        assert v.confidence_adjustment == pytest.approx(0.35)
        assert adjusted_confidence(m, v) == pytest.approx(0.95)
        assert v.is_likely_violation is True

    def test_no_side_effect_claim(self):
        text = "부작용 없는 시술"
        v = ContextValidator().validate(text, match_at(text, "시술"))
        assert v.confidence_adjustment == pytest.approx(0.15)
        assert "safety claim" in v.reasoning


# ============================================================
# BOUNDS
# ============================================================

class TestBounds:

    def test_every_signal_at_once(self):
        text = "임상 결과 100% 확실한 효과를 보장하며 부작용이 없고 개인 차이가 있을 수 있습니다."
        m = match_at(text, "효과", confidence=0.9)
        v = ContextValidator().validate(text, m)

        assert -0.45 <= v.confidence_adjustment <= 0.50
        assert v.confidence_adjustment == pytest.approx(0.15)
        assert adjusted_confidence(m, v) == 1.0

    def test_adjusted_confidence_floor(self):
        text = "개인 차이가 있으며 연구 결과에 따르면 효과는 상황에 따라 다릅니다."
        m = match_at(text, "효과", confidence=0.1)
        v = ContextValidator().validate(text, m)
        assert v.confidence_adjustment == pytest.approx(-0.35)
        assert adjusted_confidence(m, v) == 0.0


class TestPatternMatch:

    def test_invalid_span_rejected(self):
        with pytest.raises(ValueError):
            PatternMatch(matched_text="x", context="x", confidence=0.5,
                         position=5, end_position=2)
