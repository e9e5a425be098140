"""
Module Dispatcher — Orchestration Root

Registers pluggable analysis modules (the rule+AI fusion module, pricing
modules, ...) and runs them against one input:

  - parallel:   every selected module starts at once; join on all of them
  - sequential: one at a time, in selection order

Each module is raced against its own deadline. A timeout or a fault is
folded into that module's ModuleResult.error, unless the caller asked for
continue_on_error=False, in which case the first failure aborts route().

Timed-out modules are cancelled the asyncio way: the coroutine receives
CancelledError at its next await. Blocking work already running inside it
is not pre-empted.

The dispatcher holds no request state. Build one at the composition root
and share it across requests.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from medcheck.config import RoutingOptions
from medcheck.errors import (
    ModuleExecutionError,
    ModuleRegistrationError,
    ModuleTimeoutError,
)
from medcheck.models import (
    ModuleInput,
    ModuleOutput,
    ModuleResult,
    PriceResult,
    Severity,
    ViolationResult,
)

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "No modules registered."

# Severity → bucket name used in summaries
SEVERITY_BUCKETS: tuple[tuple[Severity, str], ...] = (
    (Severity.HIGH, "critical"),
    (Severity.MEDIUM, "major"),
    (Severity.LOW, "minor"),
)


class AnalysisModule(ABC):
    """A pluggable analysis unit. Names must be unique per dispatcher."""

    name: str = ""
    version: str = "0.0.0"
    enabled: bool = True

    @abstractmethod
    async def analyze(self, input: ModuleInput) -> ModuleResult:
        """Analyze one input. May raise; the dispatcher isolates failures."""
        ...


def _elapsed_ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)


class _OwnTimeout(Exception):
    """A TimeoutError raised by the module itself, not by its deadline."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause))


async def _analyze(module: AnalysisModule, input: ModuleInput) -> ModuleResult:
    try:
        return await module.analyze(input)
    except asyncio.TimeoutError as e:
        raise _OwnTimeout(e) from e


class ModuleDispatcher:

    def __init__(self):
        self._modules: dict[str, AnalysisModule] = {}

    # ------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------

    def register(self, module: AnalysisModule) -> None:
        if module.name in self._modules:
            raise ModuleRegistrationError(module.name)
        self._modules[module.name] = module
        logger.debug("Registered module %s v%s", module.name, module.version)

    def unregister(self, name: str) -> bool:
        return self._modules.pop(name, None) is not None

    def get_modules(self) -> list[AnalysisModule]:
        return list(self._modules.values())

    def get_module(self, name: str) -> Optional[AnalysisModule]:
        return self._modules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    # ------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------

    async def route(
        self,
        input: ModuleInput,
        options: Optional[RoutingOptions] = None,
    ) -> ModuleOutput:
        """
        Run the selected modules and merge their results.

        Raises:
            ModuleExecutionError: only when options.continue_on_error is False
                and a module raised or timed out.
        """
        opts = options or RoutingOptions()
        t0 = time.monotonic()

        modules = self._select(opts.modules)
        if not modules:
            return ModuleOutput(
                violations=[],
                summary=EMPTY_SUMMARY,
                confidence=0.0,
                processing_time_ms=_elapsed_ms(t0),
            )

        if opts.parallel:
            results = await self._run_parallel(modules, input, opts)
        else:
            results = await self._run_sequential(modules, input, opts)

        output = self.merge(results, t0)
        logger.info(
            "Routed %d module(s): %s", len(results), output.summary,
            extra={"duration_ms": output.processing_time_ms,
                   "violations_count": len(output.violations)},
        )
        return output

    def _select(self, names: Optional[Sequence[str]]) -> list[AnalysisModule]:
        """Explicit names resolve to registered+enabled modules; unknown names drop out."""
        if names:
            selected = [self._modules.get(n) for n in names]
            return [m for m in selected if m is not None and m.enabled]
        return [m for m in self._modules.values() if m.enabled]

    async def _run_parallel(
        self,
        modules: list[AnalysisModule],
        input: ModuleInput,
        opts: RoutingOptions,
    ) -> list[ModuleResult]:
        tasks = [
            asyncio.create_task(
                self._run_with_timeout(m, input, opts.timeout_ms, opts.continue_on_error)
            )
            for m in modules
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # First failure aborts the call; stop waiting on the rest
            for t in tasks:
                t.cancel()
            raise

    async def _run_sequential(
        self,
        modules: list[AnalysisModule],
        input: ModuleInput,
        opts: RoutingOptions,
    ) -> list[ModuleResult]:
        results: list[ModuleResult] = []
        for module in modules:
            result = await self._run_with_timeout(
                module, input, opts.timeout_ms, opts.continue_on_error,
            )
            results.append(result)
            if result.error and not opts.continue_on_error:
                break
        return results

    async def _run_with_timeout(
        self,
        module: AnalysisModule,
        input: ModuleInput,
        timeout_ms: int,
        continue_on_error: bool,
    ) -> ModuleResult:
        t0 = time.monotonic()
        try:
            return await asyncio.wait_for(_analyze(module, input), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            failure: ModuleExecutionError = ModuleTimeoutError(module.name, timeout_ms)
            message = str(failure)
            logger.warning(
                "Module %s timed out after %dms", module.name, timeout_ms,
                extra={"module_name": module.name, "timeout_ms": timeout_ms},
            )
            if not continue_on_error:
                raise failure
        except Exception as e:
            if isinstance(e, _OwnTimeout):
                e = e.cause
            message = str(e) or type(e).__name__
            logger.warning(
                "Module %s failed: %s", module.name, message,
                extra={"module_name": module.name, "error": message,
                       "error_type": type(e).__name__},
            )
            if not continue_on_error:
                raise ModuleExecutionError(module.name, e) from e

        return ModuleResult(
            module_name=module.name,
            processing_time_ms=_elapsed_ms(t0),
            error=message,
        )

    # ------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------

    def merge(self, results: Sequence[ModuleResult], t0: float) -> ModuleOutput:
        """Concatenate in module order; confidence is the mean, 1.0 when clean."""
        violations: list[ViolationResult] = []
        prices: list[PriceResult] = []
        errors: list[str] = []

        for result in results:
            violations.extend(result.violations or [])
            prices.extend(result.prices or [])
            if result.error:
                errors.append(f"[{result.module_name}] {result.error}")

        if violations:
            confidence = sum(v.confidence for v in violations) / len(violations)
        else:
            confidence = 1.0

        return ModuleOutput(
            violations=violations,
            prices=prices or None,
            summary=summarize(violations, prices, errors),
            confidence=confidence,
            processing_time_ms=_elapsed_ms(t0),
            errors=errors,
        )


def create_dispatcher(*modules: AnalysisModule) -> ModuleDispatcher:
    """Build a dispatcher with the given modules registered in order."""
    dispatcher = ModuleDispatcher()
    for module in modules:
        dispatcher.register(module)
    return dispatcher


def summarize(
    violations: Sequence[ViolationResult],
    prices: Sequence[PriceResult],
    errors: Sequence[str],
) -> str:
    """One sentence: violation count by severity bucket, then prices and errors."""
    parts: list[str] = []
    if violations:
        buckets = []
        for severity, bucket in SEVERITY_BUCKETS:
            count = sum(1 for v in violations if v.severity == severity)
            if count:
                buckets.append(f"{bucket} {count}")
        head = f"Detected {len(violations)} violation(s)"
        if buckets:
            head += f" ({', '.join(buckets)})"
        parts.append(head)
    else:
        parts.append("No violations detected")

    if prices:
        parts.append(f"{len(prices)} price item(s) analyzed")
    if errors:
        parts.append(f"{len(errors)} module error(s)")

    return ", ".join(parts) + "."
