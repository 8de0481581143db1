"""
日志模块 - 为其他模块提供日志服务
Logger module - provides a logging service to other modules.
"""

from __future__ import annotations

import logging
from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.kernel.logging import get_logger

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def create_logger_service(name: str = "app") -> dict[str, Any]:
    """构建日志服务 / Build the logger service mapping."""
    log = get_logger(name)

    def log_at(level: str, message: str, *args: Any) -> None:
        log.log(LEVELS.get(level.lower(), logging.INFO), message, *args)

    return {
        "debug": log.debug,
        "info": log.info,
        "warning": log.warning,
        "warn": log.warning,
        "error": log.error,
        "log": log_at,
    }


def create_module() -> ModuleDefinition:
    # 服务在 initialize 之后才发布到上下文，这里直接使用闭包
    services = create_logger_service()

    def initialize(context: Any) -> None:
        services["info"]("Logger module initialized")

    return ModuleDefinition(
        id="logger",
        display_name="Logger Module",
        initialize=initialize,
        services=services,
    )
