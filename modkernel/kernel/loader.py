"""
模块加载器 - 通过导入路径加载模块定义并注册
Module loader - imports module definitions by dotted path and registers them.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.kernel.errors import InvalidModule, ModuleError

if TYPE_CHECKING:
    from modkernel.kernel.orchestrator import ModuleOrchestrator

logger = logging.getLogger(__name__)

# 未指定属性时依次查找的入口
DEFAULT_ENTRY_POINTS = ("module", "create_module")


class ModuleLoader:
    """
    模块加载器
    Module loader.

    目标格式：
    - "package.module"          查找 module / create_module 属性
    - "package.module:attr"     使用指定属性
    可调用但不是模块定义的属性视为工厂，无参调用。
    A callable attribute that is not a definition is treated as a factory.
    """

    def __init__(self, orchestrator: ModuleOrchestrator) -> None:
        self._orchestrator = orchestrator
        # 目标 -> 注册名
        self._loaded: dict[str, str] = {}

    def resolve(self, target: str) -> ModuleDefinition:
        """
        解析目标为模块定义（不注册）
        Resolve a target into a definition without registering it.
        """
        if not target or not isinstance(target, str):
            raise InvalidModule("Module target must be a non-empty import path")

        module_path, _, attr = target.partition(":")
        try:
            py_module = importlib.import_module(module_path)
        except ImportError as exc:
            raise InvalidModule(
                f"Cannot import module target {target!r}: {exc}", cause=exc
            ) from exc
        except Exception as exc:
            # 目标模块导入时自身出错（语法错误、顶层代码异常等）
            raise InvalidModule(
                f"Failed to import module target {target!r}: {exc}", cause=exc
            ) from exc

        candidates = (attr,) if attr else DEFAULT_ENTRY_POINTS
        entry: Any = None
        for name in candidates:
            entry = getattr(py_module, name, None)
            if entry is not None:
                break

        # 模块本身声明了 id 等属性时直接作为定义使用
        if entry is None and not attr and hasattr(py_module, "id"):
            return self._build(target, py_module)

        if entry is None:
            raise InvalidModule(
                f"Module target {target!r} exposes none of: {', '.join(candidates)}"
            )

        if callable(entry) and not isinstance(entry, ModuleDefinition):
            try:
                entry = entry()
            except Exception as exc:
                raise InvalidModule(
                    f"Module factory for {target!r} failed: {exc}", cause=exc
                ) from exc

        return self._build(target, entry)

    def _build(self, target: str, entry: Any) -> ModuleDefinition:
        try:
            definition = ModuleDefinition.from_object(entry)
        except ModuleError:
            raise
        except (TypeError, AttributeError) as exc:
            raise InvalidModule(
                f"Module target {target!r} did not produce a module definition",
                cause=exc,
            ) from exc
        definition.validate()
        return definition

    def load(self, target: str) -> ModuleDefinition:
        """
        加载并以定义的 id 注册
        Load a target and register it under the definition's id.
        """
        definition = self.resolve(target)
        registered = self._orchestrator.register(definition.id, definition)
        self._loaded[target] = definition.id
        logger.info("已加载模块: %s (%s)", definition.id, target)
        return registered

    def load_all(self, targets: Iterable[str]) -> list[ModuleDefinition]:
        """按顺序加载多个目标 / Load several targets in order."""
        loaded = [self.load(target) for target in targets]
        logger.info("已加载 %d 个模块", len(loaded))
        return loaded

    @property
    def loaded(self) -> dict[str, str]:
        return dict(self._loaded)
