"""
Audience Analyzer — who an ad is aimed at, and whether it leans on a
vulnerable group (minors, the elderly, pregnant women, people anxious
about weight, hair loss or ageing).
"""

from __future__ import annotations

import re

from medcheck.catalogs import (
    AGE_SIGNALS,
    CONCERN_SIGNALS,
    FLAGS,
    GENDER_SIGNALS,
    VULNERABLE_GROUP_PATTERNS,
    SignalPattern,
    VulnerableGroupPattern,
)
from medcheck.models import TargetAudienceAnalysis


def _present(catalog: tuple[SignalPattern, ...], text: str) -> list[str]:
    return [s.label for s in catalog if s.search(text)]


class AudienceAnalyzer:

    def __init__(
        self,
        age: tuple[SignalPattern, ...] = AGE_SIGNALS,
        gender: tuple[SignalPattern, ...] = GENDER_SIGNALS,
        concern: tuple[SignalPattern, ...] = CONCERN_SIGNALS,
        vulnerable: tuple[VulnerableGroupPattern, ...] = VULNERABLE_GROUP_PATTERNS,
    ):
        self._age = age
        self._gender = gender
        self._concern = concern
        self._vulnerable = vulnerable

    def analyze(self, text: str) -> TargetAudienceAnalysis:
        vulnerable = [
            f"{v.group}: {v.risk}"
            for v in self._vulnerable
            if re.search(v.pattern, text, FLAGS)
        ]
        return TargetAudienceAnalysis(
            age_targeting=_present(self._age, text),
            gender_targeting=_present(self._gender, text),
            concern_targeting=_present(self._concern, text),
            targets_vulnerable_groups=len(vulnerable) > 0,
            vulnerable_group_types=vulnerable,
        )
