"""
点路径工具 - 通过 "a.b.c" 访问嵌套字典
Dot-path helpers - access nested dictionaries with "a.b.c" keys.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """
    读取嵌套值，路径不存在时返回默认值
    Read a nested value, returning default when any segment is missing.
    """
    if data is None or not path:
        return default

    current = data
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def set_path(data: MutableMapping[str, Any], path: str, value: Any) -> MutableMapping[str, Any]:
    """
    写入嵌套值，按需创建中间字典
    Write a nested value, creating intermediate dictionaries as needed.
    """
    if not path:
        return data

    keys = path.split(".")
    current = data
    for key in keys[:-1]:
        if not isinstance(current.get(key), MutableMapping):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value
    return data


def merge_defaults(target: MutableMapping[str, Any], defaults: Mapping[str, Any]) -> None:
    """
    递归合并默认值（不覆盖已有值）
    Recursively merge defaults into target without overwriting existing values.
    """
    for key, default_value in defaults.items():
        if key not in target:
            target[key] = _copy(default_value)
        elif isinstance(default_value, Mapping) and isinstance(target[key], MutableMapping):
            merge_defaults(target[key], default_value)


def _copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy(v) for v in value]
    return value
