"""
Dispatcher Tests

Tests the module dispatcher:
  1. Registry (register, unregister, lookup)
  2. Selection (explicit names, disabled and unknown modules)
  3. Parallel and sequential execution, timeouts, fault isolation
  4. Merge (ordering, confidence, summary, errors)
  5. Serialization (to_dict, ModuleOutputSchema)
"""

from __future__ import annotations

import asyncio

import pytest

from medcheck.config import RoutingOptions
from medcheck.dispatcher import (
    EMPTY_SUMMARY,
    AnalysisModule,
    ModuleDispatcher,
    create_dispatcher,
    summarize,
)
from medcheck.errors import (
    ModuleExecutionError,
    ModuleRegistrationError,
    ModuleTimeoutError,
)
from medcheck.models import (
    ModuleInput,
    ModuleResult,
    PriceResult,
    Severity,
    ViolationResult,
    ViolationStatus,
    ViolationType,
)
from medcheck.schemas import ModuleOutputSchema


# ============================================================
# STUB MODULES
# ============================================================

def make_violation(text: str = "100% 완치", confidence: float = 0.9,
                   severity: Severity = Severity.HIGH) -> ViolationResult:
    return ViolationResult(
        type=ViolationType.GUARANTEE,
        status=ViolationStatus.VIOLATION,
        severity=severity,
        matched_text=text,
        description="test violation",
        confidence=confidence,
    )


class StubModule(AnalysisModule):
    """Returns fixed violations after an optional delay, or raises."""

    def __init__(self, name, violations=None, prices=None, delay=0.0, error=None, enabled=True):
        self.name = name
        self.enabled = enabled
        self._violations = violations or []
        self._prices = prices or []
        self._delay = delay
        self._error = error
        self.calls = 0

    async def analyze(self, input):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return ModuleResult(
            module_name=self.name,
            violations=list(self._violations),
            prices=list(self._prices),
        )


INPUT = ModuleInput(content="테스트 광고 문구", source="https://example.com/ad")


# ============================================================
# REGISTRY
# ============================================================

class TestRegistry:

    def test_register_and_lookup(self):
        d = ModuleDispatcher()
        m = StubModule("a")
        d.register(m)
        assert "a" in d
        assert len(d) == 1
        assert d.get_module("a") is m
        assert d.get_modules() == [m]

    def test_duplicate_name_raises(self):
        d = ModuleDispatcher()
        d.register(StubModule("a"))
        with pytest.raises(ModuleRegistrationError, match="already registered"):
            d.register(StubModule("a"))

    def test_unregister(self):
        d = ModuleDispatcher()
        d.register(StubModule("a"))
        assert d.unregister("a") is True
        assert d.unregister("a") is False
        assert d.get_module("a") is None

    def test_create_dispatcher_registers_in_order(self):
        d = create_dispatcher(StubModule("a"), StubModule("b"))
        assert [m.name for m in d.get_modules()] == ["a", "b"]


# ============================================================
# SELECTION
# ============================================================

class TestSelection:

    @pytest.mark.asyncio
    async def test_no_modules_returns_empty_output(self):
        out = await ModuleDispatcher().route(INPUT)
        assert out.violations == []
        assert out.confidence == 0.0
        assert out.summary == EMPTY_SUMMARY

    @pytest.mark.asyncio
    async def test_unknown_and_disabled_names_dropped(self):
        a = StubModule("a", violations=[make_violation()])
        off = StubModule("off", violations=[make_violation("x")], enabled=False)
        d = create_dispatcher(a, off)

        out = await d.route(INPUT, RoutingOptions(modules=("a", "off", "ghost")))

        assert [v.matched_text for v in out.violations] == ["100% 완치"]
        assert off.calls == 0

    @pytest.mark.asyncio
    async def test_only_disabled_selected_is_empty(self):
        off = StubModule("off", enabled=False)
        out = await create_dispatcher(off).route(INPUT, RoutingOptions(modules=("off",)))
        assert out.summary == EMPTY_SUMMARY
        assert off.calls == 0

    @pytest.mark.asyncio
    async def test_default_selection_skips_disabled(self):
        a = StubModule("a")
        off = StubModule("off", enabled=False)
        await create_dispatcher(a, off).route(INPUT)
        assert a.calls == 1
        assert off.calls == 0


# ============================================================
# EXECUTION
# ============================================================

class TestParallel:

    @pytest.mark.asyncio
    async def test_timeout_becomes_error_result(self):
        fast = StubModule("fast", violations=[make_violation()])
        slow = StubModule("slow", violations=[make_violation("late")], delay=1.0)
        d = create_dispatcher(fast, slow)

        out = await d.route(INPUT, RoutingOptions(timeout_ms=50))

        assert [v.matched_text for v in out.violations] == ["100% 완치"]
        assert len(out.errors) == 1
        assert out.errors[0].startswith("[slow]")
        assert "timed out" in out.errors[0]

    @pytest.mark.asyncio
    async def test_fault_isolated(self):
        good = StubModule("good", violations=[make_violation()])
        bad = StubModule("bad", error=RuntimeError("boom"))
        out = await create_dispatcher(good, bad).route(INPUT)

        assert len(out.violations) == 1
        assert out.errors == ["[bad] boom"]
        assert "1 module error(s)" in out.summary

    @pytest.mark.asyncio
    async def test_abort_on_fault(self):
        bad = StubModule("bad", error=RuntimeError("boom"))
        d = create_dispatcher(StubModule("good"), bad)

        with pytest.raises(ModuleExecutionError) as exc:
            await d.route(INPUT, RoutingOptions(continue_on_error=False))
        assert exc.value.module_name == "bad"
        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_abort_on_timeout(self):
        slow = StubModule("slow", delay=1.0)
        d = create_dispatcher(slow)

        with pytest.raises(ModuleTimeoutError, match="timed out"):
            await d.route(INPUT, RoutingOptions(timeout_ms=20, continue_on_error=False))

    @pytest.mark.asyncio
    async def test_module_raised_timeout_is_a_fault(self):
        own = StubModule("own", error=TimeoutError("pricing lookup expired"))
        out = await create_dispatcher(own).route(INPUT, RoutingOptions(timeout_ms=5000))
        assert out.errors == ["[own] pricing lookup expired"]

    @pytest.mark.asyncio
    async def test_module_raised_timeout_aborts_as_fault(self):
        own = StubModule("own", error=TimeoutError("pricing lookup expired"))
        with pytest.raises(ModuleExecutionError) as exc:
            await create_dispatcher(own).route(
                INPUT, RoutingOptions(timeout_ms=5000, continue_on_error=False),
            )
        assert not isinstance(exc.value, ModuleTimeoutError)
        assert isinstance(exc.value.__cause__, TimeoutError)

    @pytest.mark.asyncio
    async def test_order_follows_selection_not_completion(self):
        first = StubModule("first", violations=[make_violation("A")], delay=0.05)
        second = StubModule("second", violations=[make_violation("B")])
        out = await create_dispatcher(first, second).route(INPUT)
        assert [v.matched_text for v in out.violations] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_explicit_selection_order(self):
        a = StubModule("a", violations=[make_violation("A")])
        b = StubModule("b", violations=[make_violation("B")])
        out = await create_dispatcher(a, b).route(INPUT, RoutingOptions(modules=("b", "a")))
        assert [v.matched_text for v in out.violations] == ["B", "A"]


class TestSequential:

    @pytest.mark.asyncio
    async def test_runs_in_order(self):
        a = StubModule("a", violations=[make_violation("A")])
        b = StubModule("b", violations=[make_violation("B")])
        out = await create_dispatcher(a, b).route(INPUT, RoutingOptions(parallel=False))
        assert [v.matched_text for v in out.violations] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_abort_skips_remaining_modules(self):
        a = StubModule("a", error=ValueError("bad input"))
        b = StubModule("b")
        d = create_dispatcher(a, b)

        with pytest.raises(ModuleExecutionError):
            await d.route(INPUT, RoutingOptions(parallel=False, continue_on_error=False))
        assert b.calls == 0

    @pytest.mark.asyncio
    async def test_continue_after_fault(self):
        a = StubModule("a", error=ValueError("bad input"))
        b = StubModule("b", violations=[make_violation()])
        out = await create_dispatcher(a, b).route(INPUT, RoutingOptions(parallel=False))

        assert b.calls == 1
        assert len(out.violations) == 1
        assert out.errors == ["[a] bad input"]

    @pytest.mark.asyncio
    async def test_timeout_in_sequence(self):
        slow = StubModule("slow", delay=1.0)
        b = StubModule("b")
        out = await create_dispatcher(slow, b).route(
            INPUT, RoutingOptions(parallel=False, timeout_ms=20),
        )
        assert b.calls == 1
        assert "timed out" in out.errors[0]


# ============================================================
# MERGE
# ============================================================

class TestMerge:

    @pytest.mark.asyncio
    async def test_clean_run_has_full_confidence(self):
        out = await create_dispatcher(StubModule("a")).route(INPUT)
        assert out.confidence == 1.0
        assert out.summary == "No violations detected."
        assert out.prices is None

    @pytest.mark.asyncio
    async def test_confidence_is_mean(self):
        a = StubModule("a", violations=[make_violation(confidence=0.8),
                                        make_violation(confidence=0.6)])
        out = await create_dispatcher(a).route(INPUT)
        assert out.confidence == pytest.approx(0.7)

    @pytest.mark.asyncio
    async def test_prices_merged(self):
        price = PriceResult(item_name="보톡스", advertised_price=50000)
        pricing = StubModule("price", prices=[price])
        out = await create_dispatcher(StubModule("a"), pricing).route(INPUT)
        assert out.prices == [price]
        assert out.summary == "No violations detected, 1 price item(s) analyzed."

    def test_summary_severity_buckets(self):
        violations = [
            make_violation(severity=Severity.HIGH),
            make_violation(severity=Severity.HIGH),
            make_violation(severity=Severity.LOW),
        ]
        assert summarize(violations, [], []) == "Detected 3 violation(s) (critical 2, minor 1)."

    def test_summary_with_errors(self):
        text = summarize([make_violation(severity=Severity.MEDIUM)], [], ["[a] x"])
        assert text == "Detected 1 violation(s) (major 1), 1 module error(s)."


# ============================================================
# SERIALIZATION
# ============================================================

class TestSerialization:

    @pytest.mark.asyncio
    async def test_to_dict_uses_enum_values(self):
        a = StubModule("a", violations=[make_violation()])
        data = (await create_dispatcher(a).route(INPUT)).to_dict()

        v = data["violations"][0]
        assert v["type"] == "guarantee"
        assert v["status"] == "violation"
        assert v["severity"] == "high"
        assert isinstance(data["analyzed_at"], str)

    @pytest.mark.asyncio
    async def test_output_schema(self):
        a = StubModule("a", violations=[make_violation()])
        out = await create_dispatcher(a).route(INPUT)

        schema = ModuleOutputSchema.from_output(out)
        dumped = schema.model_dump(mode="json")

        assert dumped["violations"][0]["matched_text"] == "100% 완치"
        assert dumped["violations"][0]["severity"] == "high"
        assert dumped["confidence"] == pytest.approx(0.9)
        assert dumped["prices"] is None
