"""
Web 模块 - 路由能力的 Quart 实现
Web module - Quart implementation of the routing capability.
"""

from modkernel.web.router import HTTPError, QuartRouter, RouteRequest, RouteResponse

__all__ = ["QuartRouter", "HTTPError", "RouteRequest", "RouteResponse"]
