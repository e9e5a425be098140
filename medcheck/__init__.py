"""
MedCheck — Medical Advertising Compliance Engine

Fuses deterministic rule matches, context heuristics and an optional AI
judge into one confidence-weighted verdict per text.

Public API:
  - ModuleDispatcher:  Registers analysis modules and routes input to them
  - AnalysisModule:    Base class for pluggable modules
  - ContextAnalyzer:   Rule + AI fusion module ("violation")
  - AmbiguousExpressionScanner: Finds gray-zone phrases for AI review
  - AIJudgmentIntegrator: Sends selected targets to the AI judge
  - IntentAnalyzer:    Advertising-intent probability and document type
  - AudienceAnalyzer:  Age/gender/concern targeting and vulnerable groups
  - ContextValidator:  Per-match confidence adjustment from sentence context
  - LLMProvider / LLMJudge: AI judge over a swappable LLM backend

Usage:
    from medcheck import create_context_analyzer, create_dispatcher
    from medcheck import ContextAnalyzerConfig, ModuleInput
"""

__version__ = "1.0.0"

from medcheck.analyzer import ContextAnalyzer, create_context_analyzer
from medcheck.audience import AudienceAnalyzer
from medcheck.config import ContextAnalyzerConfig, RoutingOptions, settings
from medcheck.context import ContextValidator, adjusted_confidence
from medcheck.dispatcher import AnalysisModule, ModuleDispatcher, create_dispatcher
from medcheck.errors import (
    JudgmentParseError,
    MedCheckError,
    ModuleExecutionError,
    ModuleRegistrationError,
    ModuleTimeoutError,
)
from medcheck.intent import IntentAnalyzer
from medcheck.judgment import AIDispatchFilter, AIJudgmentIntegrator, select_targets
from medcheck.llm import LLMProvider
from medcheck.llm.factory import get_provider
from medcheck.llm.judge import LLMJudge
from medcheck.models import (
    AIAnalysisResult,
    AIAnalysisTarget,
    AIJudgment,
    ModuleInput,
    ModuleOutput,
    ModuleResult,
    PatternMatch,
    ViolationResult,
)
from medcheck.scanner import AmbiguousExpressionScanner
from medcheck.schemas import ModuleOutputSchema

__all__ = [
    "ContextAnalyzer",
    "create_context_analyzer",
    "AudienceAnalyzer",
    "ContextAnalyzerConfig",
    "RoutingOptions",
    "settings",
    "ContextValidator",
    "adjusted_confidence",
    "AnalysisModule",
    "ModuleDispatcher",
    "create_dispatcher",
    "JudgmentParseError",
    "MedCheckError",
    "ModuleExecutionError",
    "ModuleRegistrationError",
    "ModuleTimeoutError",
    "IntentAnalyzer",
    "AIDispatchFilter",
    "AIJudgmentIntegrator",
    "select_targets",
    "LLMProvider",
    "get_provider",
    "LLMJudge",
    "AIAnalysisResult",
    "AIAnalysisTarget",
    "AIJudgment",
    "ModuleInput",
    "ModuleOutput",
    "ModuleResult",
    "PatternMatch",
    "ViolationResult",
    "AmbiguousExpressionScanner",
    "ModuleOutputSchema",
]
