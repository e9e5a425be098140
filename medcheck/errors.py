"""
Error Taxonomy

  - ModuleRegistrationError: configuration bug, raised at register() time.
  - ModuleExecutionError:    a module raised or timed out during analyze().
                             Only escapes route() when continue_on_error=False.
  - JudgmentParseError:      the LLM reply held no usable JSON. Always caught
                             by the judgment layer and turned into a fallback.
"""

from __future__ import annotations

from typing import Optional


class MedCheckError(Exception):
    """Base class for all engine errors."""


class ModuleRegistrationError(MedCheckError):
    """A module with the same name is already registered."""

    def __init__(self, module_name: str):
        self.module_name = module_name
        super().__init__(f"Module already registered: {module_name}")


class ModuleExecutionError(MedCheckError):
    """A module failed while analyzing."""

    def __init__(self, module_name: str, cause: Optional[BaseException] = None, message: str = ""):
        self.module_name = module_name
        self.cause = cause
        if not message:
            detail = str(cause) if cause is not None else "unknown error"
            message = f"Module {module_name} failed: {detail}"
        super().__init__(message)


class ModuleTimeoutError(ModuleExecutionError):
    """A module did not settle within its deadline."""

    def __init__(self, module_name: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(
            module_name,
            message=f"Module timed out: {module_name} ({timeout_ms}ms)",
        )


class JudgmentParseError(MedCheckError):
    """The AI reply could not be parsed into a judgment."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)
