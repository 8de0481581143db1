"""
命令行工具 - 启动应用、管理配置与模块
Command line tools - start the app, manage config and modules.
"""
