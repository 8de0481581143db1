"""
启动引导器 - 组装配置、日志、路由与模块编排
Bootstrap - wires configuration, logging, routing and module orchestration.

启动顺序：
1. 加载配置
2. 初始化日志系统
3. 创建路由适配器
4. 按配置加载并注册模块
5. 初始化所有模块
6. 启动 Web 服务
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any

from modkernel.config.defaults import build_default_config
from modkernel.config.manager import ConfigManager
from modkernel.kernel.context import ApplicationContext
from modkernel.kernel.loader import ModuleLoader
from modkernel.kernel.logging import setup_logging
from modkernel.kernel.orchestrator import ModuleOrchestrator
from modkernel.kernel.telemetry import (
    CompositeTelemetry,
    LoggingTelemetry,
    TelemetryRecorder,
)
from modkernel.web.router import QuartRouter

logger = logging.getLogger(__name__)


class Bootstrap:
    """
    引导器 - 编排整个应用的启动和关闭
    Bootstrap - orchestrates startup and shutdown of the whole application.
    """

    def __init__(
        self,
        config: ConfigManager | None = None,
        orchestrator: ModuleOrchestrator | None = None,
        debug: bool = False,
    ) -> None:
        self.config = config or ConfigManager(defaults=build_default_config())
        # 最近的生命周期事件，供状态展示使用
        self.events = TelemetryRecorder(max_buffer=200)
        self.orchestrator = orchestrator or ModuleOrchestrator(
            telemetry=CompositeTelemetry(LoggingTelemetry(), self.events)
        )
        self.loader = ModuleLoader(self.orchestrator)
        self.router: QuartRouter | None = None
        self.context: ApplicationContext | None = None
        self._debug = debug
        self._shutdown_event = asyncio.Event()

    async def start(self) -> ApplicationContext:
        """
        启动应用（不包含 Web 服务）
        Start the application, without serving HTTP yet.
        """
        self.config.load()
        setup_logging(
            level="DEBUG" if self._debug else self.config.get("logging.level", "INFO"),
            log_file=self.config.get("logging.file") or None,
        )
        logger.info("modkernel 正在启动...")

        self.router = QuartRouter(
            debug=self._debug or bool(self.config.get("web.debug", False))
        )

        targets = self.config.get("modules.enabled", [])
        self.loader.load_all(targets)

        self.context = await self.orchestrator.initialize_all(
            self.router, self.config.as_dict()
        )
        logger.info("已初始化 %d 个模块", len(self.orchestrator.initialized))
        return self.context

    async def serve(self, host: str | None = None, port: int | None = None) -> None:
        """
        启动 Web 服务直到收到关闭信号
        Serve HTTP until a shutdown signal is received.
        """
        if self.router is None:
            raise RuntimeError("Bootstrap.start() must be called before serve()")

        loop = asyncio.get_running_loop()
        signals = (signal.SIGINT, signal.SIGTERM) if sys.platform != "win32" else ()
        for sig in signals:
            loop.add_signal_handler(sig, self._shutdown_event.set)

        try:
            await self.router.listen(
                port=port or int(self.config.get("web.port", 3000)),
                host=host or self.config.get("web.host", "0.0.0.0"),
                shutdown_trigger=self._shutdown_event.wait,
            )
        finally:
            for sig in signals:
                loop.remove_signal_handler(sig)
            await self.shutdown()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """
        优雅关闭
        Graceful shutdown.
        """
        if self.context is None:
            return
        logger.info("modkernel 正在关闭...")
        failures = await self.orchestrator.shutdown_all(self.context)
        self.context = None
        if failures:
            logger.warning(
                "%d 个模块关闭失败: %s",
                len(failures),
                ", ".join(str(f.module_name) for f in failures),
            )
        logger.info("modkernel 已完全关闭")

    def describe(self) -> list[dict[str, Any]]:
        """已注册模块概览 / Summary of registered modules."""
        return [
            {
                "name": name,
                "display_name": definition.display_name,
                "dependencies": list(definition.dependencies),
                "initialized": self.orchestrator.is_initialized(name),
            }
            for name, definition in self.orchestrator.list_all().items()
        ]
