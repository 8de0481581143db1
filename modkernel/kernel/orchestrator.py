"""
模块编排器 - 按依赖顺序初始化模块，按逆序关闭
Module orchestrator - initializes modules in dependency order and shuts
them down in reverse.

编排器持有注册表、钩子表和已初始化集合，不存在全局单例。
The orchestrator owns the registry, the hook table and the initialized set;
there is no process-wide singleton.

初始化是严格串行的：一个模块挂起时不会开始另一个模块。
Initialization is strictly sequential: no module starts while another one
is suspended.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from enum import Enum, auto
from typing import Any

from modkernel.kernel.context import ApplicationContext
from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.kernel.errors import (
    CircularDependency,
    InitializationFailure,
    ModuleError,
    ModuleNotFound,
    ShutdownFailure,
    UnresolvedDependency,
)
from modkernel.kernel.hooks import HookCallback, HookRegistry, LifecycleEvent
from modkernel.kernel.registry import ModuleRegistry
from modkernel.kernel.telemetry import (
    LoggingTelemetry,
    Telemetry,
    TelemetryEvent,
    TelemetryKind,
)

logger = logging.getLogger(__name__)


class ModuleState(Enum):
    """模块在一次运行中的状态 / State of a module within one run."""

    UNREGISTERED = auto()
    REGISTERED = auto()
    INITIALIZING = auto()
    INITIALIZED = auto()


async def _call(func: Any, *args: Any) -> Any:
    """调用同步或异步函数 / Call a sync or async function."""
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class ModuleOrchestrator:
    """
    模块编排器
    Module orchestrator.

    生命周期：
    1. register() - 注册模块
    2. initialize_all() - 依赖优先的深度遍历初始化，返回应用上下文
    3. shutdown_all() - 按初始化逆序关闭，单个模块失败不影响其他模块
    """

    def __init__(
        self,
        registry: ModuleRegistry | None = None,
        hooks: HookRegistry | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._telemetry = telemetry or LoggingTelemetry()
        self._registry = registry or ModuleRegistry(telemetry=self._telemetry)
        self._hooks = hooks or HookRegistry()
        # 已初始化集合（dict 保持插入顺序，即初始化顺序）
        self._initialized: dict[str, None] = {}
        # 正在初始化的模块，用于检测循环依赖
        self._in_progress: dict[str, None] = {}
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def telemetry(self) -> Telemetry:
        return self._telemetry

    # --- 注册 / Registration ------------------------------------------------

    def register(
        self,
        name: str,
        definition: ModuleDefinition | Mapping[str, Any],
    ) -> ModuleDefinition:
        """注册模块 / Register a module."""
        return self._registry.register(name, definition)

    def get(self, name: str) -> ModuleDefinition | None:
        return self._registry.get(name)

    def list_all(self) -> dict[str, ModuleDefinition]:
        return self._registry.list_all()

    def on(
        self,
        event: LifecycleEvent | str,
        callback: HookCallback | None = None,
    ) -> Any:
        """注册生命周期钩子 / Register a lifecycle hook."""
        return self._hooks.on(event, callback)

    # --- 状态查询 / Introspection --------------------------------------------

    @property
    def initialized(self) -> list[str]:
        """按初始化顺序返回已初始化模块 / Initialized modules, in order."""
        return list(self._initialized)

    def is_initialized(self, name: str) -> bool:
        return name in self._initialized

    def state_of(self, name: str) -> ModuleState:
        if name in self._initialized:
            return ModuleState.INITIALIZED
        if name in self._in_progress:
            return ModuleState.INITIALIZING
        if name in self._registry:
            return ModuleState.REGISTERED
        return ModuleState.UNREGISTERED

    # --- 初始化 / Initialization ---------------------------------------------

    async def initialize_all(
        self,
        app: Any = None,
        config: Mapping[str, Any] | None = None,
    ) -> ApplicationContext:
        """
        初始化所有已注册模块
        Initialize every registered module.

        每次调用都会清空上一次运行的已初始化集合。
        Each call starts from an empty initialized set.
        """
        async with self._lock:
            self._initialized.clear()
            self._in_progress.clear()

            context = ApplicationContext(
                app=app,
                config=config if config is not None else {},
            )
            self._emit(TelemetryKind.RUN_STARTED)

            await self._hooks.fire(LifecycleEvent.BEFORE_ALL_INIT, context)

            for name in self._registry:
                try:
                    await self.initialize_module(name, context)
                except ModuleError as exc:
                    self._emit(
                        TelemetryKind.MODULE_FAILED,
                        module_name=exc.module_name or name,
                        error=exc,
                    )
                    raise

            await self._hooks.fire(LifecycleEvent.AFTER_ALL_INIT, context)
            self._emit(
                TelemetryKind.RUN_COMPLETED,
                extra={"initialized": list(self._initialized)},
            )
            return context

    async def initialize_module(self, name: str, context: ApplicationContext) -> None:
        """
        初始化单个模块及其依赖（深度优先，已初始化则跳过）
        Initialize one module and its dependencies (depth-first, memoized).
        """
        await self._initialize(name, context, ())

    async def _initialize(
        self,
        name: str,
        context: ApplicationContext,
        path: tuple[str, ...],
    ) -> None:
        if name in self._initialized:
            return

        definition = self._registry.get(name)
        if definition is None:
            raise ModuleNotFound(name)

        if name in self._in_progress:
            cycle = path[path.index(name):] + (name,)
            raise CircularDependency(cycle)

        self._in_progress[name] = None
        try:
            for dep in definition.dependencies:
                if dep not in self._registry:
                    raise UnresolvedDependency(name, dep)
                await self._initialize(dep, context, path + (name,))

            self._emit(TelemetryKind.MODULE_INITIALIZING, module_name=name)
            module_context = context.for_module(name)
            try:
                await self._hooks.fire(LifecycleEvent.BEFORE_INIT, module_context)

                if definition.initialize is not None:
                    await _call(definition.initialize, context)

                if definition.routes is not None and context.app is not None:
                    definition.routes(context.app)

                if definition.services is not None:
                    context.services[name] = definition.services

                self._initialized[name] = None
                self._emit(TelemetryKind.MODULE_INITIALIZED, module_name=name)

                await self._hooks.fire(LifecycleEvent.AFTER_INIT, module_context)
            except Exception as exc:
                # 依赖错误在此块之外抛出；这里只有本模块自身的失败
                # Dependency errors are raised outside this block
                raise InitializationFailure(name, exc) from exc
        finally:
            self._in_progress.pop(name, None)

    # --- 关闭 / Shutdown -----------------------------------------------------

    async def shutdown_all(self, context: ApplicationContext) -> list[ShutdownFailure]:
        """
        按初始化逆序关闭所有模块
        Shut down all modules in reverse initialization order.

        单个模块关闭失败会被记录并收集，不会中断其余模块的关闭。
        A failing module is reported and collected; the rest still shut down.
        """
        async with self._lock:
            self._emit(TelemetryKind.SHUTDOWN_STARTED)
            await self._hooks.fire(LifecycleEvent.BEFORE_SHUTDOWN, context)

            failures: list[ShutdownFailure] = []
            for name in reversed(list(self._initialized)):
                definition = self._registry.get(name)
                if definition is None or definition.shutdown is None:
                    continue
                try:
                    await _call(definition.shutdown, context)
                except Exception as exc:
                    failure = ShutdownFailure(name, exc)
                    failure.__cause__ = exc
                    failures.append(failure)
                    self._emit(
                        TelemetryKind.MODULE_SHUTDOWN_FAILED,
                        module_name=name,
                        error=failure,
                    )
                else:
                    self._emit(TelemetryKind.MODULE_SHUTDOWN, module_name=name)

            self._initialized.clear()

            await self._hooks.fire(LifecycleEvent.AFTER_SHUTDOWN, context)
            self._emit(
                TelemetryKind.SHUTDOWN_COMPLETED,
                extra={"failures": [f.module_name for f in failures]},
            )
            return failures

    @asynccontextmanager
    async def session(
        self,
        app: Any = None,
        config: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[ApplicationContext]:
        """
        初始化并在退出时关闭
        Initialize on entry, shut down on exit.
        """
        context = await self.initialize_all(app, config)
        try:
            yield context
        finally:
            await self.shutdown_all(context)

    def _emit(
        self,
        kind: TelemetryKind,
        module_name: str | None = None,
        error: ModuleError | None = None,
        extra: dict | None = None,
    ) -> None:
        self._telemetry.emit(
            TelemetryEvent(kind=kind, module_name=module_name, error=error, extra=extra)
        )
