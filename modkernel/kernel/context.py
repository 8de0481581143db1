"""
应用上下文 - 每次运行中传给所有模块的共享对象
Application context - the shared per-run object handed to every module.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ApplicationContext:
    """
    一次 initialize_all() 运行的共享运行时状态
    Shared runtime state for one initialize_all() run.

    services 随模块初始化完成逐步填充；config 由调用方提供，核心从不写入；
    state 是本次运行私有的扁平键值存储。
    services is filled incrementally as modules finish initializing. config is
    supplied by the caller and never written by the core. state is a flat
    key/value store private to this run.
    """

    app: Any = None
    config: Mapping[str, Any] = field(default_factory=dict)
    services: dict[str, Any] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    # 仅在传给单模块钩子的副本上设置
    # Only set on the copies passed to per-module hooks
    module_name: str | None = None

    def get_service(self, module_name: str, service_name: str | None = None) -> Any:
        """
        获取模块的服务表或其中一个服务，不存在时返回 None
        Return a module's services, or one named service. Never raises.
        """
        module_services = self.services.get(module_name)
        if module_services is None:
            return None
        if service_name is None:
            return module_services
        try:
            return module_services.get(service_name)
        except AttributeError:
            return None

    def set_state(self, key: str, value: Any) -> None:
        """设置状态 / Set a state value."""
        self.state[key] = value

    def get_state(self, key: str, default: Any = None) -> Any:
        """获取状态 / Get a state value."""
        if key not in self.state:
            return default
        return self.state[key]

    def for_module(self, module_name: str) -> ApplicationContext:
        """
        带 module_name 的副本，与原上下文共享 services、config 和 state
        A copy decorated with module_name, sharing services, config and state.
        """
        return dataclasses.replace(self, module_name=module_name)
