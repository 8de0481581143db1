"""
模块描述符 - 描述一个功能模块及其声明的能力
Module descriptor - describes a feature module and the capabilities it declares.

能力在构造时确定并在注册时校验，调用时不再做鸭子类型判断。
Capabilities are fixed at construction and validated at registration time,
so the orchestrator never duck-types a module at call time.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Flag, auto
from typing import TYPE_CHECKING, Any

from modkernel.kernel.errors import InvalidModule

if TYPE_CHECKING:
    from modkernel.kernel.context import ApplicationContext

LifecycleCallable = Callable[["ApplicationContext"], "Awaitable[None] | None"]
RoutesCallable = Callable[[Any], None]


class Capability(Flag):
    """模块可选能力 / Optional module capabilities."""

    NONE = 0
    INITIALIZE = auto()
    SHUTDOWN = auto()
    ROUTES = auto()
    SERVICES = auto()


@dataclass(frozen=True, eq=False)
class ModuleDefinition:
    """
    模块定义 - 注册后不可变
    Module definition - immutable once registered.
    """

    # 模块标识
    id: str
    # 显示名称
    display_name: str
    # 依赖的模块名（按声明顺序初始化）
    dependencies: tuple[str, ...] = ()
    initialize: LifecycleCallable | None = None
    shutdown: LifecycleCallable | None = None
    # 挂载路由，仅调用一次
    routes: RoutesCallable | None = None
    # 对外发布的服务，原样发布到上下文
    services: Mapping[str, Any] | None = None
    capabilities: Capability = field(init=False, default=Capability.NONE)

    def __post_init__(self) -> None:
        deps = self.dependencies
        if isinstance(deps, str) or not isinstance(deps, Iterable):
            raise InvalidModule(
                f"Module {self.id!r}: dependencies must be a sequence of names",
                module_name=self.id or None,
            )
        object.__setattr__(self, "dependencies", tuple(deps))

        caps = Capability.NONE
        if self.initialize is not None:
            caps |= Capability.INITIALIZE
        if self.shutdown is not None:
            caps |= Capability.SHUTDOWN
        if self.routes is not None:
            caps |= Capability.ROUTES
        if self.services is not None:
            caps |= Capability.SERVICES
        object.__setattr__(self, "capabilities", caps)

    def has(self, capability: Capability) -> bool:
        """是否声明了某个能力 / Whether a capability is declared."""
        return capability in self.capabilities

    def validate(self) -> None:
        """
        校验身份字段与能力形状
        Validate identity fields and capability shapes.
        """
        for field_name in ("id", "display_name"):
            value = getattr(self, field_name)
            if not value or not isinstance(value, str):
                raise InvalidModule(
                    f"Module must have a non-empty {field_name}",
                    module_name=self.id if isinstance(self.id, str) else None,
                )

        for dep in self.dependencies:
            if not dep or not isinstance(dep, str):
                raise InvalidModule(
                    f"Module {self.id!r} declares an invalid dependency name: {dep!r}",
                    module_name=self.id,
                )

        for capability, attr in (
            (Capability.INITIALIZE, "initialize"),
            (Capability.SHUTDOWN, "shutdown"),
            (Capability.ROUTES, "routes"),
        ):
            if self.has(capability) and not callable(getattr(self, attr)):
                raise InvalidModule(
                    f"Module {self.id!r}: {attr} must be callable",
                    module_name=self.id,
                )

        if self.has(Capability.SERVICES) and not isinstance(self.services, Mapping):
            raise InvalidModule(
                f"Module {self.id!r}: services must be a mapping",
                module_name=self.id,
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ModuleDefinition:
        """
        从字典构造（兼容 {id, name, ...} 形式）
        Build from a mapping (accepts the {id, name, ...} shape).
        """
        return cls(
            id=data.get("id", ""),
            display_name=data.get("display_name", data.get("name", "")),
            dependencies=data.get("dependencies") or (),
            initialize=data.get("initialize"),
            shutdown=data.get("shutdown"),
            routes=data.get("routes"),
            services=data.get("services"),
        )

    @classmethod
    def from_object(cls, obj: Any) -> ModuleDefinition:
        """
        从任意带属性的对象（如 Python 模块）构造
        Build from any object exposing the attributes, e.g. a Python module.
        """
        if isinstance(obj, ModuleDefinition):
            return obj
        if isinstance(obj, Mapping):
            return cls.from_mapping(obj)
        return cls.from_mapping(
            {
                key: getattr(obj, key)
                for key in (
                    "id",
                    "display_name",
                    "name",
                    "dependencies",
                    "initialize",
                    "shutdown",
                    "routes",
                    "services",
                )
                if hasattr(obj, key)
            }
        )
