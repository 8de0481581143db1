"""
模块错误体系 - 结构化、带类型的编排错误
Module error taxonomy - structured, typed orchestration errors.

每个错误携带 kind、module_name 和 cause，而不是在外部异常对象上附加属性。
Every error carries kind, module_name and cause instead of patching
attributes onto a foreign exception object.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class ErrorKind(str, Enum):
    """错误类别 / Error kind."""

    INVALID_MODULE = "invalid_module"
    DUPLICATE_MODULE = "duplicate_module"
    MODULE_NOT_FOUND = "module_not_found"
    UNRESOLVED_DEPENDENCY = "unresolved_dependency"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INITIALIZATION_FAILURE = "initialization_failure"
    SHUTDOWN_FAILURE = "shutdown_failure"


class ModuleError(Exception):
    """Base class for every error raised by the orchestration core."""

    kind: ErrorKind = ErrorKind.INVALID_MODULE

    def __init__(
        self,
        message: str,
        *,
        module_name: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.module_name = module_name
        self.cause = cause

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "module_name": self.module_name,
            "message": str(self),
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class InvalidModule(ModuleError):
    kind = ErrorKind.INVALID_MODULE


class DuplicateModule(ModuleError):
    """Reported, never raised: the first registration wins."""

    kind = ErrorKind.DUPLICATE_MODULE

    def __init__(self, module_name: str) -> None:
        super().__init__(
            f"Module {module_name!r} is already registered, keeping the first definition",
            module_name=module_name,
        )


class ModuleNotFound(ModuleError):
    kind = ErrorKind.MODULE_NOT_FOUND

    def __init__(self, module_name: str) -> None:
        super().__init__(f"Module {module_name!r} not found", module_name=module_name)


class UnresolvedDependency(ModuleError):
    kind = ErrorKind.UNRESOLVED_DEPENDENCY

    def __init__(self, module_name: str, dependency: str) -> None:
        super().__init__(
            f"Dependency {dependency!r} required by {module_name!r} is not registered",
            module_name=module_name,
        )
        self.dependency = dependency


class CircularDependency(ModuleError):
    kind = ErrorKind.CIRCULAR_DEPENDENCY

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            "Circular dependency detected: " + " -> ".join(self.cycle),
            module_name=self.cycle[-1] if self.cycle else None,
        )


class InitializationFailure(ModuleError):
    kind = ErrorKind.INITIALIZATION_FAILURE

    def __init__(self, module_name: str, cause: BaseException) -> None:
        super().__init__(
            f"Failed to initialize module {module_name!r}: {cause}",
            module_name=module_name,
            cause=cause,
        )


class ShutdownFailure(ModuleError):
    kind = ErrorKind.SHUTDOWN_FAILURE

    def __init__(self, module_name: str, cause: BaseException) -> None:
        super().__init__(
            f"Error shutting down module {module_name!r}: {cause}",
            module_name=module_name,
            cause=cause,
        )
