"""
微内核模块 - 框架的最小化核心
Microkernel module - the minimal core of the framework.

包含模块注册表、生命周期钩子、应用上下文与模块编排器。
Contains the module registry, lifecycle hooks, application context and
the module orchestrator.
"""

from modkernel.kernel.context import ApplicationContext
from modkernel.kernel.descriptor import Capability, ModuleDefinition
from modkernel.kernel.errors import (
    CircularDependency,
    DuplicateModule,
    ErrorKind,
    InitializationFailure,
    InvalidModule,
    ModuleError,
    ModuleNotFound,
    ShutdownFailure,
    UnresolvedDependency,
)
from modkernel.kernel.hooks import HookRegistry, LifecycleEvent
from modkernel.kernel.loader import ModuleLoader
from modkernel.kernel.orchestrator import ModuleOrchestrator, ModuleState
from modkernel.kernel.registry import ModuleRegistry
from modkernel.kernel.telemetry import (
    CompositeTelemetry,
    LoggingTelemetry,
    TelemetryEvent,
    TelemetryKind,
    TelemetryRecorder,
)

__all__ = [
    "ApplicationContext",
    "Capability",
    "CircularDependency",
    "CompositeTelemetry",
    "DuplicateModule",
    "ErrorKind",
    "HookRegistry",
    "InitializationFailure",
    "InvalidModule",
    "LifecycleEvent",
    "LoggingTelemetry",
    "ModuleDefinition",
    "ModuleError",
    "ModuleLoader",
    "ModuleNotFound",
    "ModuleOrchestrator",
    "ModuleRegistry",
    "ModuleState",
    "ShutdownFailure",
    "TelemetryEvent",
    "TelemetryKind",
    "TelemetryRecorder",
    "UnresolvedDependency",
]
