"""
modkernel - 模块化应用微内核
modkernel - a microkernel for modular applications.

模块声明依赖、初始化与关闭例程、路由和对外服务，
由编排器按依赖顺序初始化并通过应用上下文共享服务。
Modules declare dependencies, init/shutdown routines, routes and services;
the orchestrator initializes them in dependency order and shares services
through the application context.
"""

__app_name__ = "modkernel"
__version__ = "1.0.0"
