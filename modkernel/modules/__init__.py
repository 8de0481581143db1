"""
内置示例模块
Built-in example modules.
"""
