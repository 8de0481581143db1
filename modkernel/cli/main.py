"""
CLI 主入口 - 使用 Click 框架
CLI main entry - using Click framework.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import sys

import click

from modkernel.kernel.errors import ModuleError

MODULE_TEMPLATE = '''"""
{pascal} module.
"""

from __future__ import annotations

from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.web.router import RouteRequest, RouteResponse


def create_module() -> ModuleDefinition:
    def initialize(context: Any) -> None:
        context.get_service("logger", "info")("{pascal} module initialized")

    def routes(app: Any) -> None:
        async def hello(req: RouteRequest, res: RouteResponse) -> Any:
            return {{"message": "Hello from {pascal} module!"}}

        app.get("/api/{kebab}", hello)

    def do_something(data: str) -> str:
        return f"Processed by {pascal}: {{data}}"

    return ModuleDefinition(
        id="{kebab}",
        display_name="{pascal} Module",
        dependencies=("logger",),
        initialize=initialize,
        routes=routes,
        services={{"do_something": do_something}},
    )
'''


def module_names(name: str) -> tuple[str, str, str]:
    """
    由输入名推导 kebab / snake / pascal 三种命名
    Derive kebab, snake and pascal case names from the input.
    """
    kebab = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name.strip())
    kebab = re.sub(r"[\s_]+", "-", kebab).lower().strip("-")
    snake = kebab.replace("-", "_")
    pascal = "".join(part.capitalize() for part in kebab.split("-") if part)
    return kebab, snake, pascal


@click.group()
def cli() -> None:
    """modkernel - 模块化应用微内核"""
    pass


@cli.command()
@click.option("--host", default=None, help="Web 服务监听地址")
@click.option("--port", default=None, type=int, help="Web 服务端口")
@click.option("--config", "config_path", default=None, help="配置文件路径")
@click.option("--debug", is_flag=True, help="调试模式")
def run(host: str | None, port: int | None, config_path: str | None, debug: bool) -> None:
    """启动应用 / Start the application."""
    from modkernel.config.defaults import build_default_config
    from modkernel.config.manager import ConfigManager
    from modkernel.kernel.bootstrap import Bootstrap

    logger = logging.getLogger("modkernel")
    bootstrap = Bootstrap(
        config=ConfigManager(defaults=build_default_config(), config_path=config_path),
        debug=debug,
    )

    async def main() -> None:
        await bootstrap.start()
        await bootstrap.serve(host=host, port=port)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
    except ModuleError:
        logger.exception("模块初始化失败")
        sys.exit(1)
    except Exception:
        logger.exception("致命错误")
        sys.exit(1)


@cli.command()
@click.option("--config", "config_path", default=None, help="配置文件路径")
@click.option("--force", is_flag=True, help="覆盖已有配置")
def init(config_path: str | None, force: bool) -> None:
    """初始化配置 / Initialize configuration."""
    from modkernel.config.defaults import build_default_config
    from modkernel.config.manager import ConfigManager

    manager = ConfigManager(defaults=build_default_config(), config_path=config_path)
    if os.path.exists(manager.path) and not force:
        click.echo(f"配置文件已存在: {manager.path}")
        if not click.confirm("是否覆盖?"):
            return
        os.remove(manager.path)
    elif force and os.path.exists(manager.path):
        os.remove(manager.path)

    manager.load()
    click.echo(f"配置文件已创建: {manager.path}")


@cli.command()
def version() -> None:
    """显示版本信息 / Show version info."""
    from modkernel import __app_name__, __version__

    click.echo(f"{__app_name__} v{__version__}")


@cli.group()
def modules() -> None:
    """模块管理 / Module management."""
    pass


@modules.command("list")
@click.option("--config", "config_path", default=None, help="配置文件路径")
def modules_list(config_path: str | None) -> None:
    """列出配置中启用的模块 / List modules enabled in the configuration."""
    from modkernel.config.defaults import build_default_config
    from modkernel.config.manager import ConfigManager
    from modkernel.kernel.loader import ModuleLoader
    from modkernel.kernel.orchestrator import ModuleOrchestrator
    from modkernel.kernel.telemetry import TelemetryRecorder

    manager = ConfigManager(defaults=build_default_config(), config_path=config_path)
    manager.load(persist=False)
    targets = manager.get("modules.enabled", [])
    if not targets:
        click.echo("没有启用的模块")
        return

    loader = ModuleLoader(ModuleOrchestrator(telemetry=TelemetryRecorder()))
    for target in targets:
        try:
            definition = loader.resolve(target)
        except ModuleError as exc:
            click.echo(f"  ! {target}: {exc}", err=True)
            continue
        deps = ", ".join(definition.dependencies) or "-"
        click.echo(f"  - {definition.id} ({definition.display_name}) deps: {deps}")


@cli.command("create-module")
@click.argument("name")
@click.option("--directory", default="modules", help="模块文件输出目录")
def create_module(name: str, directory: str) -> None:
    """创建新模块脚手架 / Scaffold a new module."""
    kebab, snake, pascal = module_names(name)
    if not snake:
        click.echo("请提供模块名称", err=True)
        sys.exit(1)

    module_path = os.path.join(directory, f"{snake}.py")
    if os.path.exists(module_path):
        click.echo(f"模块文件已存在: {module_path}", err=True)
        sys.exit(1)

    os.makedirs(directory, exist_ok=True)
    init_path = os.path.join(directory, "__init__.py")
    if not os.path.exists(init_path):
        with open(init_path, "w", encoding="utf-8"):
            pass

    with open(module_path, "w", encoding="utf-8") as f:
        f.write(MODULE_TEMPLATE.format(kebab=kebab, pascal=pascal))

    package = directory.replace(os.sep, ".").strip(".")
    click.echo(f"模块已创建: {kebab}")
    click.echo(f"文件: {module_path}")
    click.echo("在配置的 modules.enabled 中加入:")
    click.echo(f"  {package}.{snake}")
