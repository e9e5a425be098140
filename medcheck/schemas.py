"""
Output Schemas — Serializable Result Models

Pydantic models for handing a merged ModuleOutput to persistence or HTTP
layers. Build them with ModuleOutputSchema.from_output().
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from medcheck.models import ModuleOutput, PriceResult, ViolationResult


# ============================================================
# VIOLATIONS
# ============================================================

class LegalBasisSchema(BaseModel):
    law: str
    article: str
    description: str = ""


class ViolationSchema(BaseModel):
    type: str
    status: str
    severity: str
    matched_text: str
    description: str
    legal_basis: list[LegalBasisSchema] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    position: Optional[int] = None
    pattern_id: Optional[str] = None
    suggestion: Optional[str] = None
    source: str = "rule"

    @classmethod
    def from_violation(cls, v: ViolationResult) -> "ViolationSchema":
        return cls(
            type=v.type.value,
            status=v.status.value,
            severity=v.severity.value,
            matched_text=v.matched_text,
            description=v.description,
            legal_basis=[
                LegalBasisSchema(law=b.law, article=b.article, description=b.description)
                for b in v.legal_basis
            ],
            confidence=v.confidence,
            position=v.position,
            pattern_id=v.pattern_id,
            suggestion=v.suggestion,
            source=v.source,
        )


# ============================================================
# PRICES
# ============================================================

class PriceSchema(BaseModel):
    item_name: str
    advertised_price: float
    coverage_type: str = "unknown"
    price_status: str = "unknown"
    reference_min: Optional[float] = None
    reference_max: Optional[float] = None
    comment: Optional[str] = None
    confidence: float = 0.0

    @classmethod
    def from_price(cls, p: PriceResult) -> "PriceSchema":
        return cls(
            item_name=p.item_name,
            advertised_price=p.advertised_price,
            coverage_type=p.coverage_type,
            price_status=p.price_status,
            reference_min=p.reference_min,
            reference_max=p.reference_max,
            comment=p.comment,
            confidence=p.confidence,
        )


# ============================================================
# MERGED OUTPUT
# ============================================================

class ModuleOutputSchema(BaseModel):
    """Serialized result of one dispatcher route() call."""
    violations: list[ViolationSchema]
    summary: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: int
    prices: Optional[list[PriceSchema]] = None
    errors: list[str] = Field(default_factory=list)
    analyzed_at: datetime

    @classmethod
    def from_output(cls, output: ModuleOutput) -> "ModuleOutputSchema":
        prices = None
        if output.prices is not None:
            prices = [PriceSchema.from_price(p) for p in output.prices]
        return cls(
            violations=[ViolationSchema.from_violation(v) for v in output.violations],
            summary=output.summary,
            confidence=output.confidence,
            processing_time_ms=output.processing_time_ms,
            prices=prices,
            errors=list(output.errors),
            analyzed_at=output.analyzed_at,
        )
