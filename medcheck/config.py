"""
MedCheck Configuration

Central settings loaded from environment variables. Only the composition
root reads them; the analyzers and the dispatcher take explicit config
objects (ContextAnalyzerConfig, RoutingOptions).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    ENGINE_VERSION: str = "1.0.0"

    # --- AI Judge ---
    LLM_PROVIDER: str = os.getenv("MEDCHECK_LLM_PROVIDER", "gemini")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # --- Context Analysis ---
    CONFIDENCE_THRESHOLD: float = float(
        os.getenv("MEDCHECK_CONFIDENCE_THRESHOLD", "0.7")
    )
    MAX_AI_ANALYSIS: int = int(os.getenv("MEDCHECK_MAX_AI_ANALYSIS", "5"))

    # --- Routing ---
    ROUTE_TIMEOUT_MS: int = int(os.getenv("MEDCHECK_ROUTE_TIMEOUT_MS", "30000"))
    ROUTE_PARALLEL: bool = _env_bool("MEDCHECK_ROUTE_PARALLEL", "true")
    CONTINUE_ON_ERROR: bool = _env_bool("MEDCHECK_CONTINUE_ON_ERROR", "true")


settings = Settings()


@dataclass(frozen=True)
class ContextAnalyzerConfig:
    """Configuration of the rule+AI fusion module."""
    provider: str = "gemini"
    api_key: str = ""
    model: Optional[str] = None
    confidence_threshold: float = 0.7   # Matches below this go to the AI
    max_ai_analysis: int = 5            # Hard cap on AI calls per text

    @classmethod
    def from_settings(cls, s: Settings = settings) -> "ContextAnalyzerConfig":
        return cls(
            provider=s.LLM_PROVIDER,
            api_key=s.GEMINI_API_KEY,
            model=s.GEMINI_MODEL,
            confidence_threshold=s.CONFIDENCE_THRESHOLD,
            max_ai_analysis=s.MAX_AI_ANALYSIS,
        )


@dataclass(frozen=True)
class RoutingOptions:
    """Per-call options for ModuleDispatcher.route()."""
    modules: Optional[tuple[str, ...]] = None   # None = every enabled module
    parallel: bool = True
    timeout_ms: int = 30000
    continue_on_error: bool = True

    @classmethod
    def from_settings(cls, s: Settings = settings, **overrides) -> "RoutingOptions":
        values = dict(
            parallel=s.ROUTE_PARALLEL,
            timeout_ms=s.ROUTE_TIMEOUT_MS,
            continue_on_error=s.CONTINUE_ON_ERROR,
        )
        values.update(overrides)
        return cls(**values)
