"""
配置模块
Configuration module.
"""

from modkernel.config.defaults import build_default_config
from modkernel.config.manager import ConfigManager

__all__ = ["ConfigManager", "build_default_config"]
