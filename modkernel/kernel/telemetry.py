"""
遥测 - 编排器发出的结构化生命周期事件
Telemetry - structured lifecycle events emitted by the orchestrator.

编排器从不直接打印，而是把 TelemetryEvent 交给注入的协作者：
LoggingTelemetry 转发到日志系统，TelemetryRecorder 用环形缓冲保存最近事件。
The orchestrator never prints. It hands TelemetryEvent objects to an injected
collaborator: LoggingTelemetry forwards them to the logging system, and
TelemetryRecorder keeps a ring buffer that tests and dashboards can inspect.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable

from modkernel.kernel.errors import ModuleError

logger = logging.getLogger(__name__)


class TelemetryKind(str, Enum):
    """生命周期事件类型 / Kinds of lifecycle events."""

    MODULE_REGISTERED = "module.registered"
    MODULE_DUPLICATE = "module.duplicate"
    MODULE_INITIALIZING = "module.initializing"
    MODULE_INITIALIZED = "module.initialized"
    MODULE_FAILED = "module.failed"
    MODULE_SHUTDOWN = "module.shutdown"
    MODULE_SHUTDOWN_FAILED = "module.shutdown_failed"
    RUN_STARTED = "run.started"
    RUN_COMPLETED = "run.completed"
    SHUTDOWN_STARTED = "shutdown.started"
    SHUTDOWN_COMPLETED = "shutdown.completed"


@dataclass
class TelemetryEvent:
    """单个结构化生命周期事件 / A single structured lifecycle event."""

    kind: TelemetryKind
    module_name: str | None = None
    error: ModuleError | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    extra: dict | None = None


@runtime_checkable
class Telemetry(Protocol):
    """可以接收生命周期事件的对象 / Anything that can receive lifecycle events."""

    def emit(self, event: TelemetryEvent) -> None:
        ...


class LoggingTelemetry:
    """
    默认协作者：把生命周期事件转换为日志记录
    Default collaborator: turns lifecycle events into log records.
    """

    # 事件类型 -> 日志级别
    _LEVELS = {
        TelemetryKind.MODULE_REGISTERED: logging.INFO,
        TelemetryKind.MODULE_DUPLICATE: logging.WARNING,
        TelemetryKind.MODULE_INITIALIZING: logging.DEBUG,
        TelemetryKind.MODULE_INITIALIZED: logging.INFO,
        TelemetryKind.MODULE_FAILED: logging.ERROR,
        TelemetryKind.MODULE_SHUTDOWN: logging.INFO,
        TelemetryKind.MODULE_SHUTDOWN_FAILED: logging.ERROR,
        TelemetryKind.RUN_STARTED: logging.DEBUG,
        TelemetryKind.RUN_COMPLETED: logging.INFO,
        TelemetryKind.SHUTDOWN_STARTED: logging.DEBUG,
        TelemetryKind.SHUTDOWN_COMPLETED: logging.INFO,
    }

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def emit(self, event: TelemetryEvent) -> None:
        level = self._LEVELS.get(event.kind, logging.INFO)
        if event.error is not None:
            # 优先记录原始异常的堆栈
            exc = event.error.cause or event.error
            self._logger.log(
                level,
                "%s: %s",
                event.kind.value,
                event.error,
                exc_info=(type(exc), exc, exc.__traceback__)
                if level >= logging.ERROR
                else None,
            )
            return
        if event.module_name:
            self._logger.log(level, "%s: %s", event.kind.value, event.module_name)
        else:
            self._logger.log(level, "%s", event.kind.value)


class TelemetryRecorder:
    """
    最近生命周期事件的环形缓冲，并分发给订阅者
    Ring buffer of recent lifecycle events with subscriber fan-out.

    订阅者的异常只记录日志，不会传回编排器。
    Subscriber errors are logged and never reach the orchestrator.
    """

    def __init__(self, max_buffer: int = 1000) -> None:
        self._buffer: deque[TelemetryEvent] = deque(maxlen=max_buffer)
        self._subscribers: list[Callable[[TelemetryEvent], None]] = []

    def emit(self, event: TelemetryEvent) -> None:
        self._buffer.append(event)
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception("Telemetry subscriber failed on %s", event.kind.value)

    def subscribe(self, callback: Callable[[TelemetryEvent], None]) -> Callable[[], None]:
        """
        订阅生命周期事件
        Subscribe to lifecycle events.

        返回取消订阅函数。
        Returns a function to unsubscribe.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def events(self) -> list[TelemetryEvent]:
        return list(self._buffer)

    def kinds(self) -> list[TelemetryKind]:
        return [event.kind for event in self._buffer]

    def of_kind(self, kind: TelemetryKind) -> list[TelemetryEvent]:
        return [event for event in self._buffer if event.kind == kind]

    def modules(self, kind: TelemetryKind) -> list[str | None]:
        """
        指定类型事件的模块名（按发出顺序）
        Module names for every event of the given kind, in emit order.
        """
        return [event.module_name for event in self.of_kind(kind)]

    def clear(self) -> None:
        self._buffer.clear()


class CompositeTelemetry:
    """将每个事件转发给多个协作者 / Forwards every event to several collaborators."""

    def __init__(self, *sinks: Telemetry) -> None:
        self._sinks = list(sinks)

    def emit(self, event: TelemetryEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
