"""
Intent Analyzer — advertising-intent scoring and document typing.

The same sentence reads very differently in an ad than in a regulation
notice or a news story. This module estimates how promotional the whole
text is and what kind of document it is, so downstream consumers can
weigh pattern hits accordingly.
"""

from __future__ import annotations

import re

from medcheck.catalogs import (
    ADVERTISING_SIGNALS,
    DOCUMENT_TYPE_RULES,
    FLAGS,
    INTENT_FLAG_KEYWORDS,
    NON_ADVERTISING_SIGNALS,
    DocumentTypeRule,
    SignalPattern,
)
from medcheck.models import DocumentType, IntentAnalysis, clamp


class IntentAnalyzer:
    """Scores advertising intent from positive and negative signal catalogs."""

    def __init__(
        self,
        positive: tuple[SignalPattern, ...] = ADVERTISING_SIGNALS,
        negative: tuple[SignalPattern, ...] = NON_ADVERTISING_SIGNALS,
        document_rules: tuple[DocumentTypeRule, ...] = DOCUMENT_TYPE_RULES,
    ):
        self._positive = positive
        self._negative = negative
        self._document_rules = document_rules

    def analyze(self, text: str) -> IntentAnalysis:
        signals: list[str] = []
        score = 0.0

        # Presence only: each signal counts once however often it occurs
        for signal in self._positive + self._negative:
            if signal.search(text):
                signals.append(signal.label)
                score += signal.weight

        probability = round(clamp(score), 4)
        flags = {
            flag: any(k in s for s in signals for k in keywords)
            for flag, keywords in INTENT_FLAG_KEYWORDS.items()
        }

        return IntentAnalysis(
            document_type=self.resolve_document_type(text, signals, probability),
            advertising_intent_probability=probability,
            has_promotional_elements=flags["has_promotional_elements"],
            has_call_to_action=flags["has_call_to_action"],
            has_urgency=flags["has_urgency"],
            has_price_info=flags["has_price_info"],
            has_contact_info=flags["has_contact_info"],
            advertising_signals=signals,
            confidence=min(0.95, 0.6 + 0.05 * len(signals)),
        )

    def resolve_document_type(
        self, text: str, signals: list[str], probability: float,
    ) -> DocumentType:
        """Walk the priority chain; first matching rule wins."""
        for rule in self._document_rules:
            if rule.kind == "signal" and rule.value in signals:
                return rule.document_type
            if rule.kind == "intent" and probability >= rule.value:
                return rule.document_type
            if rule.kind == "text" and re.search(rule.value, text, FLAGS):
                return rule.document_type
        return DocumentType.UNKNOWN
