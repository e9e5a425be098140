"""
Ambiguous Expression Scanner

Surfaces phrases the deterministic rule engine may have missed:
implied efficacy, vague statistics, safety reassurance, and so on.
Hits are not violations — they are candidates for AI review.
"""

from __future__ import annotations

import re

from medcheck.catalogs import AMBIGUOUS_PATTERNS, FLAGS, AmbiguousPattern
from medcheck.models import AIAnalysisTarget

CONTEXT_RADIUS = 50
DUPLICATE_OFFSET_WINDOW = 10


def context_window(text: str, start: int, end: int, radius: int = CONTEXT_RADIUS) -> str:
    """Return text[start-radius : end+radius], clamped to the string bounds."""
    return text[max(0, start - radius):min(len(text), end + radius)]


class AmbiguousExpressionScanner:
    """Scans text against every ambiguous-expression pattern."""

    def __init__(self, patterns: tuple[AmbiguousPattern, ...] = AMBIGUOUS_PATTERNS):
        self._patterns = patterns

    def scan(self, text: str) -> list[AIAnalysisTarget]:
        """
        Collect every non-overlapping occurrence of every pattern.

        Two hits count as the same target when their matched text is
        identical and the text sits within DUPLICATE_OFFSET_WINDOW
        characters of the same place in their context windows. Only the
        first is kept.
        """
        targets: list[AIAnalysisTarget] = []
        if not text:
            return targets

        for pattern in self._patterns:
            for m in re.finditer(pattern.pattern, text, FLAGS):
                matched = m.group(0)
                if not matched:
                    continue
                context = context_window(text, m.start(), m.end())
                if self._is_duplicate(targets, matched, context):
                    continue
                targets.append(AIAnalysisTarget(
                    text=matched,
                    context=context,
                    reason=f"{pattern.category}: {pattern.description}",
                ))

        return targets

    @staticmethod
    def _is_duplicate(
        targets: list[AIAnalysisTarget], matched: str, context: str,
    ) -> bool:
        offset = context.find(matched)
        return any(
            t.text == matched
            and abs(t.context.find(matched) - offset) < DUPLICATE_OFFSET_WINDOW
            for t in targets
        )
