"""
配置管理器 - 读写和合并配置
Config manager - reads, writes, and merges configuration.

支持 JSON 与 YAML 文件，默认值合并和嵌套键访问。
Supports JSON and YAML files with default merging and nested key access.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import yaml

from modkernel.utils.dotpath import get_path, merge_defaults, set_path

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join("data", "config", "modkernel.json")
CONFIG_ENV_VAR = "MODKERNEL_CONFIG"


def default_config_path() -> str:
    """配置文件路径，可由环境变量覆盖 / Config path, overridable by env var."""
    return os.environ.get(CONFIG_ENV_VAR) or CONFIG_FILE


class ConfigManager:
    """
    配置管理器 - 框架的配置中心
    Config manager - the configuration center of the framework.

    支持：
    - 嵌套键访问（如 "web.port"）
    - 默认值自动合并
    - 持久化到 JSON / YAML 文件
    """

    def __init__(
        self,
        defaults: dict[str, Any] | None = None,
        config_path: str | None = None,
    ) -> None:
        self._defaults = defaults or {}
        self._config: dict[str, Any] = {}
        self._config_path = config_path or default_config_path()

    @property
    def path(self) -> str:
        return self._config_path

    @property
    def _is_yaml(self) -> bool:
        return self._config_path.endswith((".yaml", ".yml"))

    def load(self, persist: bool = True) -> None:
        """
        加载配置文件
        Load configuration file.
        """
        if os.path.exists(self._config_path):
            try:
                with open(self._config_path, encoding="utf-8") as f:
                    if self._is_yaml:
                        data = yaml.safe_load(f) or {}
                    else:
                        data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("top-level configuration must be a mapping")
                self._config = data
                logger.info("配置已从 %s 加载", self._config_path)
            except (json.JSONDecodeError, yaml.YAMLError, ValueError, OSError):
                logger.warning("加载配置失败，使用默认值: %s", self._config_path, exc_info=True)
                self._config = {}
        else:
            self._config = {}
            logger.info("未找到配置文件，将使用默认配置: %s", self._config_path)

        merge_defaults(self._config, self._defaults)
        if persist:
            self.save()

    def save(self) -> None:
        """
        保存配置到文件
        Save configuration to file.
        """
        try:
            os.makedirs(os.path.dirname(self._config_path) or ".", exist_ok=True)
            with open(self._config_path, "w", encoding="utf-8") as f:
                if self._is_yaml:
                    yaml.safe_dump(self._config, f, allow_unicode=True, sort_keys=False)
                else:
                    json.dump(self._config, f, ensure_ascii=False, indent=2)
        except OSError:
            logger.exception("保存配置失败")

    def get(self, key: str, default: Any = None) -> Any:
        """
        获取配置值（支持嵌套键，如 "web.port"）
        Get config value (supports nested keys like "web.port").
        """
        return get_path(self._config, key, default)

    def set(self, key: str, value: Any) -> None:
        """
        设置配置值（支持嵌套键）
        Set config value (supports nested keys).
        """
        set_path(self._config, key, value)

    def as_dict(self) -> dict[str, Any]:
        """获取完整配置字典 / Get the full config dictionary."""
        return dict(self._config)
