"""
模块注册表 - 按名称保存模块定义
Module registry - stores module definitions by name.

注册表只追加：重复注册同名模块不会覆盖，而是返回已有定义并发出告警。
The registry is append-only: registering a name twice never overwrites,
it returns the existing definition and reports a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.kernel.errors import DuplicateModule, InvalidModule
from modkernel.kernel.telemetry import (
    LoggingTelemetry,
    Telemetry,
    TelemetryEvent,
    TelemetryKind,
)

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """
    模块注册表
    Module registry.

    支持：
    - 按名称注册和获取模块定义
    - 字典形式的定义自动转换
    - 注册顺序即初始化遍历顺序
    """

    def __init__(self, telemetry: Telemetry | None = None) -> None:
        # 名称 -> 模块定义（保持注册顺序）
        self._modules: dict[str, ModuleDefinition] = {}
        self._telemetry = telemetry or LoggingTelemetry()

    def register(
        self,
        name: str,
        definition: ModuleDefinition | Mapping[str, Any],
    ) -> ModuleDefinition:
        """
        注册一个模块
        Register a module.
        """
        if not name or not isinstance(name, str):
            raise InvalidModule("Module name must be a non-empty string")

        if definition is None:
            raise InvalidModule(
                f"Module {name!r} must be a valid definition", module_name=name
            )
        if isinstance(definition, Mapping):
            definition = ModuleDefinition.from_mapping(definition)
        elif not isinstance(definition, ModuleDefinition):
            raise InvalidModule(
                f"Module {name!r} must be a ModuleDefinition or a mapping, "
                f"got {type(definition).__name__}",
                module_name=name,
            )
        definition.validate()

        existing = self._modules.get(name)
        if existing is not None:
            self._telemetry.emit(
                TelemetryEvent(
                    kind=TelemetryKind.MODULE_DUPLICATE,
                    module_name=name,
                    error=DuplicateModule(name),
                )
            )
            return existing

        self._modules[name] = definition
        self._telemetry.emit(
            TelemetryEvent(kind=TelemetryKind.MODULE_REGISTERED, module_name=name)
        )
        return definition

    def get(self, name: str) -> ModuleDefinition | None:
        """按名称获取模块定义 / Get a module definition by name."""
        return self._modules.get(name)

    def list_all(self) -> dict[str, ModuleDefinition]:
        """获取注册表快照（独立副本） / Get an independent snapshot of the registry."""
        return dict(self._modules)

    def names(self) -> list[str]:
        """按注册顺序返回模块名 / Module names in registration order."""
        return list(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._modules))

    def __len__(self) -> int:
        return len(self._modules)
