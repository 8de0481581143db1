"""
生命周期钩子 - 在初始化和关闭前后触发的回调
Lifecycle hooks - callbacks fired around initialization and shutdown.

钩子按注册顺序依次执行，只追加不移除。
Hooks run sequentially in registration order; they are appended, never removed.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modkernel.kernel.context import ApplicationContext

logger = logging.getLogger(__name__)

HookCallback = Callable[["ApplicationContext"], "Awaitable[None] | None"]


class LifecycleEvent(str, Enum):
    """生命周期事件 / Lifecycle event."""

    BEFORE_ALL_INIT = "beforeAllInit"
    BEFORE_INIT = "beforeInit"
    AFTER_INIT = "afterInit"
    AFTER_ALL_INIT = "afterAllInit"
    BEFORE_SHUTDOWN = "beforeShutdown"
    AFTER_SHUTDOWN = "afterShutdown"

    @classmethod
    def coerce(cls, event: LifecycleEvent | str) -> LifecycleEvent:
        """
        接受枚举或其字符串值
        Accept the enum member or its string value.
        """
        if isinstance(event, cls):
            return event
        try:
            return cls(event)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown lifecycle event {event!r}, expected one of: {allowed}"
            ) from None


class HookRegistry:
    """
    钩子注册表
    Hook registry.
    """

    def __init__(self) -> None:
        # 事件 -> 回调列表
        self._hooks: dict[LifecycleEvent, list[HookCallback]] = {
            event: [] for event in LifecycleEvent
        }

    def on(
        self,
        event: LifecycleEvent | str,
        callback: HookCallback | None = None,
    ) -> HookCallback | Callable[[HookCallback], HookCallback]:
        """
        注册钩子；省略 callback 时作为装饰器使用
        Register a hook; used as a decorator when callback is omitted.
        """
        kind = LifecycleEvent.coerce(event)

        if callback is None:

            def decorator(func: HookCallback) -> HookCallback:
                self._add(kind, func)
                return func

            return decorator

        self._add(kind, callback)
        return callback

    def _add(self, event: LifecycleEvent, callback: HookCallback) -> None:
        if not callable(callback):
            raise TypeError(f"Hook for {event.value} must be callable")
        self._hooks[event].append(callback)
        logger.debug("已注册钩子 %s -> %s", event.value, getattr(callback, "__name__", callback))

    def callbacks(self, event: LifecycleEvent | str) -> list[HookCallback]:
        """获取事件的回调副本 / Get a copy of an event's callbacks."""
        return list(self._hooks[LifecycleEvent.coerce(event)])

    def count(self, event: LifecycleEvent | str | None = None) -> int:
        """获取钩子数量 / Get the number of hooks."""
        if event is None:
            return sum(len(callbacks) for callbacks in self._hooks.values())
        return len(self._hooks[LifecycleEvent.coerce(event)])

    async def fire(self, event: LifecycleEvent | str, context: ApplicationContext) -> None:
        """
        依次触发事件的所有钩子，异常向上传播
        Fire every hook of an event in order; exceptions propagate.
        """
        for callback in self.callbacks(event):
            result = callback(context)
            if inspect.isawaitable(result):
                await result
