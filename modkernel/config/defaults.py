"""
默认配置 - 框架的所有默认配置值
Default configuration - all default configuration values of the framework.
"""

from __future__ import annotations

from typing import Any

# 框架版本
VERSION = "1.0.0"


def build_default_config() -> dict[str, Any]:
    """
    构建默认配置
    Build the default configuration.
    """
    return {
        # Web 服务配置
        "web": {
            "host": "0.0.0.0",
            "port": 3000,
            "debug": False,
        },
        # 启动时加载的模块（导入路径，按顺序注册）
        "modules": {
            "enabled": [
                "modkernel.modules.logger",
                "modkernel.modules.auth",
                "modkernel.modules.users",
                "modkernel.modules.products",
            ],
        },
        # 认证配置（需要令牌的路径前缀）
        "auth": {
            "protected_paths": [],
        },
        # 日志配置
        "logging": {
            "level": "INFO",
            "file": "",
        },
    }
