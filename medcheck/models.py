"""
Domain Models

Plain dataclasses shared by every stage of the engine. Request-scoped:
created per analysis, consumed within the same request, then discarded.

AIAnalysisResult is the exception: it is the wire shape of the external
AI judge, so it is a pydantic model and validates what the LLM sends back.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


# ============================================================
# ENUMERATIONS
# ============================================================

class ViolationType(str, Enum):
    GUARANTEE = "guarantee"
    FALSE_CLAIM = "false_claim"
    EXAGGERATION = "exaggeration"
    COMPARISON = "comparison"
    PRICE_INDUCEMENT = "price_inducement"
    BEFORE_AFTER = "before_after"
    TESTIMONIAL = "testimonial"
    OTHER = "other"


class ViolationStatus(str, Enum):
    VIOLATION = "violation"   # certain
    LIKELY = "likely"         # gray zone, leaning violation
    POSSIBLE = "possible"
    CLEAN = "clean"


class Severity(str, Enum):
    HIGH = "high"       # reported as "critical"
    MEDIUM = "medium"   # reported as "major"
    LOW = "low"         # reported as "minor"


class DocumentType(str, Enum):
    ADVERTISEMENT = "ADVERTISEMENT"
    INFORMATION = "INFORMATION"
    REGULATION = "REGULATION"
    EDUCATION = "EDUCATION"
    NEWS = "NEWS"
    REVIEW = "REVIEW"
    FAQ = "FAQ"
    UNKNOWN = "UNKNOWN"


# ============================================================
# RULE ENGINE BOUNDARY
# ============================================================

@dataclass(frozen=True)
class PatternMatch:
    """A single deterministic rule-engine hit. Produced outside this core."""
    matched_text: str
    context: str              # Text window around the match
    confidence: float         # 0.0 to 1.0
    position: int             # 0-based start offset
    end_position: int         # 0-based end offset (exclusive)
    pattern_id: Optional[str] = None
    category: Optional[str] = None       # e.g. "치료효과보장"
    severity: str = "major"              # "critical" | "major" | "minor"
    legal_basis: Optional[str] = None    # Article reference, e.g. "제56조 제2항 제2호"
    description: str = ""
    suggestion: Optional[str] = None

    def __post_init__(self):
        if self.position < 0 or self.position > self.end_position:
            raise ValueError(
                f"Invalid match span: position={self.position}, "
                f"end_position={self.end_position}"
            )


# ============================================================
# AI JUDGE BOUNDARY
# ============================================================

class AIAnalysisResult(BaseModel):
    """Judgment returned by the external AI collaborator.

    Accepts both the camelCase keys the prompt asks for (isViolation,
    violationType, legalReference) and snake_case names.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_violation: bool = False
    confidence: float = 0.5
    violation_type: Optional[str] = None
    reasoning: str
    suggestion: Optional[str] = None
    legal_reference: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        if v is None:
            return 0.5
        try:
            value = float(v)
        except (TypeError, ValueError) as e:
            raise ValueError(f"confidence must be a number, got {v!r}") from e
        if not math.isfinite(value):
            raise ValueError(f"confidence must be finite, got {v!r}")
        return clamp(value)

    @field_validator("reasoning", mode="before")
    @classmethod
    def _coerce_reasoning(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


@dataclass
class AIAnalysisTarget:
    """A candidate phrase sent to the AI judge."""
    text: str
    context: str
    reason: str
    pattern_match: Optional[PatternMatch] = None


@dataclass
class AIJudgment:
    """One successful AI call: what was asked and what came back."""
    target: AIAnalysisTarget
    result: AIAnalysisResult


# ============================================================
# VIOLATIONS AND PRICES
# ============================================================

@dataclass
class LegalBasis:
    law: str
    article: str
    description: str = ""


@dataclass
class ViolationResult:
    type: ViolationType
    status: ViolationStatus
    severity: Severity
    matched_text: str
    description: str
    legal_basis: list[LegalBasis] = field(default_factory=list)
    confidence: float = 0.0
    position: Optional[int] = None
    pattern_id: Optional[str] = None
    suggestion: Optional[str] = None
    source: str = "rule"      # "rule" | "ai"

    def __post_init__(self):
        self.confidence = clamp(self.confidence)


@dataclass
class PriceResult:
    """Shape emitted by sibling pricing modules; not computed here."""
    item_name: str
    advertised_price: float
    coverage_type: str = "unknown"   # covered | non_covered | mixed | unknown
    price_status: str = "unknown"    # normal | high | low | unknown
    reference_min: Optional[float] = None
    reference_max: Optional[float] = None
    comment: Optional[str] = None
    confidence: float = 0.0


# ============================================================
# HEURISTIC ANALYSES
# ============================================================

@dataclass
class IntentAnalysis:
    document_type: DocumentType
    advertising_intent_probability: float
    has_promotional_elements: bool
    has_call_to_action: bool
    has_urgency: bool
    has_price_info: bool
    has_contact_info: bool
    advertising_signals: list[str]
    confidence: float


@dataclass
class TargetAudienceAnalysis:
    age_targeting: list[str]
    gender_targeting: list[str]
    concern_targeting: list[str]
    targets_vulnerable_groups: bool
    vulnerable_group_types: list[str]   # "group: risk"


@dataclass
class ContextValidation:
    is_likely_violation: bool
    reasoning: str
    has_disclaimer: bool
    has_objective_evidence: bool
    uses_conditional_language: bool
    confidence_adjustment: float        # Bounded to [-0.45, +0.50]
    disclaimer_content: Optional[str] = None


@dataclass
class ContextAnalysisResult:
    """Everything the rule+AI fusion module learned about one text."""
    pattern_matches: list[PatternMatch]
    ai_analyzed_items: list[AIJudgment] = field(default_factory=list)
    additional_violations: list[ViolationResult] = field(default_factory=list)
    ai_processing_time_ms: int = 0
    ai_call_count: int = 0
    intent_analysis: Optional[IntentAnalysis] = None
    target_audience_analysis: Optional[TargetAudienceAnalysis] = None
    context_validations: list[ContextValidation] = field(default_factory=list)


# ============================================================
# MODULE BOUNDARY
# ============================================================

@dataclass(frozen=True)
class ModuleInput:
    """Immutable snapshot handed to every module of one request."""
    content: str
    source: str = ""
    images: tuple[str, ...] = ()
    collected_at: Optional[datetime] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ModuleResult:
    module_name: str
    violations: list[ViolationResult] = field(default_factory=list)
    prices: list[PriceResult] = field(default_factory=list)
    processing_time_ms: int = 0
    error: Optional[str] = None
    analysis: Optional[Any] = None   # Module-specific detail, e.g. ContextAnalysisResult


@dataclass
class ModuleOutput:
    """Merged result of one route() call."""
    violations: list[ViolationResult]
    summary: str
    confidence: float
    processing_time_ms: int
    prices: Optional[list[PriceResult]] = None
    errors: list[str] = field(default_factory=list)
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        self.confidence = clamp(self.confidence)

    def to_dict(self) -> dict:
        """Serialize for persistence / HTTP layers (enums become their values)."""
        data = asdict(self)
        data["violations"] = [_violation_dict(v) for v in self.violations]
        data["analyzed_at"] = self.analyzed_at.isoformat()
        return data


def _violation_dict(v: ViolationResult) -> dict:
    data = asdict(v)
    data["type"] = v.type.value
    data["status"] = v.status.value
    data["severity"] = v.severity.value
    return data
