"""
Context Analyzer — Rule + AI Fusion Module

Orchestrates one text through every signal source and returns a single
ModuleResult:

  Phase 1: Rule engine       PatternMatches (injected, deterministic)
  Phase 2: Context           per-match confidence adjustment → violations
  Phase 3: AI review         low-confidence matches + ambiguous phrases,
                             judged one at a time (only when an AI client
                             is configured)
  Phase 4: Intent/audience   whole-text heuristics, attached as detail

Direct rule violations come first, AI-derived violations are appended
after them. Build one instance at the composition root and register it
with a ModuleDispatcher.
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence, Union

from medcheck.audience import AudienceAnalyzer
from medcheck.catalogs import (
    ABSOLUTE_VIOLATION_IDS,
    MEDICAL_SERVICE_ACT,
    RULE_CATEGORY_TYPES,
)
from medcheck.config import ContextAnalyzerConfig
from medcheck.context import ContextValidator, adjusted_confidence
from medcheck.dispatcher import AnalysisModule
from medcheck.intent import IntentAnalyzer
from medcheck.judgment import AIDispatchFilter, AIJudgeClient, AIJudgmentIntegrator
from medcheck.llm import LLMProvider
from medcheck.llm.factory import get_provider
from medcheck.llm.judge import LLMJudge
from medcheck.models import (
    ContextAnalysisResult,
    ContextValidation,
    LegalBasis,
    ModuleInput,
    ModuleResult,
    PatternMatch,
    Severity,
    ViolationResult,
    ViolationStatus,
    ViolationType,
)
from medcheck.scanner import AmbiguousExpressionScanner

logger = logging.getLogger(__name__)

RuleEngine = Callable[
    [str], Union[Sequence[PatternMatch], Awaitable[Sequence[PatternMatch]]]
]

# Rule-engine severity → output severity
_SEVERITY_MAP = {
    "critical": Severity.HIGH,
    "major": Severity.MEDIUM,
    "minor": Severity.LOW,
}

_DOWNGRADE = {
    Severity.HIGH: Severity.MEDIUM,
    Severity.MEDIUM: Severity.LOW,
    Severity.LOW: Severity.LOW,
}


def status_for(confidence: float) -> ViolationStatus:
    if confidence >= 0.85:
        return ViolationStatus.VIOLATION
    if confidence >= 0.7:
        return ViolationStatus.LIKELY
    return ViolationStatus.POSSIBLE


class ContextAnalyzer(AnalysisModule):
    """The rule+AI fusion module."""

    version = "1.0.0"

    def __init__(
        self,
        rule_engine: RuleEngine,
        ai_client: Optional[AIJudgeClient] = None,
        config: Optional[ContextAnalyzerConfig] = None,
        name: str = "violation",
        scanner: Optional[AmbiguousExpressionScanner] = None,
        intent_analyzer: Optional[IntentAnalyzer] = None,
        audience_analyzer: Optional[AudienceAnalyzer] = None,
        validator: Optional[ContextValidator] = None,
        integrator: Optional[AIJudgmentIntegrator] = None,
    ):
        self.name = name
        self.enabled = True
        self._rule_engine = rule_engine
        self._ai_client = ai_client
        self._config = config or ContextAnalyzerConfig()
        self._scanner = scanner or AmbiguousExpressionScanner()
        self._intent = intent_analyzer or IntentAnalyzer()
        self._audience = audience_analyzer or AudienceAnalyzer()
        self._validator = validator or ContextValidator()
        self._integrator = integrator or AIJudgmentIntegrator()
        self._filter = AIDispatchFilter(
            confidence_threshold=self._config.confidence_threshold,
            cap=self._config.max_ai_analysis,
        )

    @property
    def config(self) -> ContextAnalyzerConfig:
        return self._config

    def is_configured(self) -> bool:
        """True when an AI client is wired in."""
        return self._ai_client is not None

    async def analyze(self, input: ModuleInput) -> ModuleResult:
        t0 = time.monotonic()
        text = input.content or ""

        matches = await self._find_matches(text)
        analysis = await self.analyze_text(text, matches)

        violations = [
            self.to_violation(m, v)
            for m, v in zip(matches, analysis.context_validations)
        ]
        violations.extend(analysis.additional_violations)

        return ModuleResult(
            module_name=self.name,
            violations=violations,
            processing_time_ms=int((time.monotonic() - t0) * 1000),
            analysis=analysis,
        )

    async def _find_matches(self, text: str) -> list[PatternMatch]:
        if not text.strip():
            return []
        found = self._rule_engine(text)
        if inspect.isawaitable(found):
            found = await found
        return list(found or [])

    async def analyze_text(
        self, text: str, pattern_matches: Sequence[PatternMatch],
    ) -> ContextAnalysisResult:
        """Run every heuristic stage plus AI review over one text."""
        result = ContextAnalysisResult(pattern_matches=list(pattern_matches))

        if self._ai_client is not None:
            t0 = time.monotonic()
            targets = self._filter.select_targets(
                pattern_matches, self._scanner.scan(text),
            )
            integration = await self._integrator.integrate(
                targets, self._ai_client, pattern_matches,
            )
            result.ai_analyzed_items = integration.judgments
            result.additional_violations = integration.new_violations
            result.ai_call_count = integration.call_count
            result.ai_processing_time_ms = int((time.monotonic() - t0) * 1000)

        result.intent_analysis = self._intent.analyze(text)
        result.target_audience_analysis = self._audience.analyze(text)
        result.context_validations = [
            self._validator.validate(text, m) for m in pattern_matches
        ]
        return result

    @staticmethod
    def to_violation(match: PatternMatch, validation: ContextValidation) -> ViolationResult:
        """Convert a rule match into a violation, weighted by its context."""
        confidence = adjusted_confidence(match, validation)

        severity = _SEVERITY_MAP.get(match.severity, Severity.MEDIUM)
        if validation.has_disclaimer and match.pattern_id not in ABSOLUTE_VIOLATION_IDS:
            severity = _DOWNGRADE[severity]

        legal_basis = []
        if match.legal_basis:
            legal_basis.append(LegalBasis(
                law=MEDICAL_SERVICE_ACT,
                article=match.legal_basis,
                description=match.description,
            ))

        return ViolationResult(
            type=RULE_CATEGORY_TYPES.get(match.category or "", ViolationType.OTHER),
            status=status_for(confidence),
            severity=severity,
            matched_text=match.matched_text,
            description=match.description or validation.reasoning,
            legal_basis=legal_basis,
            confidence=confidence,
            position=match.position,
            pattern_id=match.pattern_id,
            suggestion=match.suggestion,
            source="rule",
        )


def create_context_analyzer(
    config: ContextAnalyzerConfig,
    rule_engine: RuleEngine,
    provider: Optional[LLMProvider] = None,
    ai_client: Optional[AIJudgeClient] = None,
) -> ContextAnalyzer:
    """
    Composition-root helper.

    An explicit ai_client wins. Otherwise a provider (given, or built from
    config when an API key is present) is wrapped in an LLMJudge. With
    neither, the AI stage is off and only the deterministic stages run.
    """
    if ai_client is None:
        if provider is None and config.api_key:
            provider = get_provider(config.provider, api_key=config.api_key, model=config.model)
        if provider is not None:
            ai_client = LLMJudge(provider)
    if ai_client is None:
        logger.info("No AI client configured; AI review disabled")
    return ContextAnalyzer(rule_engine, ai_client=ai_client, config=config)
