"""
路由适配器 - 基于 Quart 的路由能力实现
Router adapter - Quart-backed implementation of the routing capability.

模块只看到 get/post/put/delete/use/listen 这组最小接口，
处理器签名为 handler(request, response)。
Modules only see the minimal get/post/put/delete/use/listen surface;
handlers have the signature handler(request, response).
"""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from quart import Quart, g, jsonify, request

logger = logging.getLogger(__name__)

# Express 风格的路径参数 ":id"
_PARAM_PATTERN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class HTTPError(Exception):
    """
    处理器抛出以返回指定状态码
    Raised by handlers to answer with a specific status code.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class RouteRequest:
    """传递给处理器的请求 / Request passed to handlers."""

    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    # 由认证中间件填充 / Set by authentication middleware
    user: Any = None


class RouteResponse:
    """
    处理器可选使用的响应对象
    Response object a handler may use instead of returning a value.
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.body: Any = None
        self.sent = False

    def status(self, code: int) -> RouteResponse:
        self.status_code = code
        return self

    def json(self, data: Any) -> RouteResponse:
        self.body = data
        self.sent = True
        return self

    send = json


Handler = Callable[[RouteRequest, RouteResponse], Any]
Middleware = Callable[[RouteRequest], "Awaitable[Any] | Any"]


def to_rule(path: str) -> str:
    """把 "/api/users/:id" 转换为 "/api/users/<id>" / Translate Express-style paths."""
    return _PARAM_PATTERN.sub(r"<\1>", path)


class QuartRouter:
    """
    路由能力 - 将模块路由挂载到 Quart 应用
    Routing capability - mounts module routes onto a Quart application.
    """

    def __init__(self, name: str = "modkernel", debug: bool = False) -> None:
        self._app = Quart(name)
        self._debug = debug
        self._middlewares: list[Middleware] = []
        # (方法, 路径) 列表，用于展示
        self._routes: list[tuple[str, str]] = []
        # 端点 -> 当前处理器
        self._handlers: dict[str, Handler] = {}
        self._app.before_request(self._run_middlewares)
        self._app.register_error_handler(404, self._not_found)

    @property
    def app(self) -> Quart:
        return self._app

    @property
    def routes(self) -> list[tuple[str, str]]:
        return list(self._routes)

    def get(self, path: str, handler: Handler) -> None:
        self._add("GET", path, handler)

    def post(self, path: str, handler: Handler) -> None:
        self._add("POST", path, handler)

    def put(self, path: str, handler: Handler) -> None:
        self._add("PUT", path, handler)

    def delete(self, path: str, handler: Handler) -> None:
        self._add("DELETE", path, handler)

    def use(self, middleware: Middleware) -> None:
        """
        注册中间件；返回非 None 时直接作为响应
        Register middleware; a non-None return short-circuits the request.
        """
        if not callable(middleware):
            raise TypeError("Middleware must be callable")
        if middleware in self._middlewares:
            return
        self._middlewares.append(middleware)

    async def listen(
        self,
        port: int = 3000,
        host: str = "0.0.0.0",
        shutdown_trigger: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        """启动服务器 / Start server."""
        from hypercorn.asyncio import serve
        from hypercorn.config import Config

        config = Config()
        config.bind = [f"{host}:{port}"]
        config.accesslog = None

        logger.info("Web 服务运行在 http://%s:%d", host, port)
        for method, path in self._routes:
            logger.debug("  %-6s %s", method, path)

        await serve(self._app, config, shutdown_trigger=shutdown_trigger)

    def _add(self, method: str, path: str, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError(f"Handler for {method} {path} must be callable")
        rule = to_rule(path)
        endpoint = f"{method.lower()}:{rule}"

        # 重复挂载（如再次 initialize_all）只替换处理器，URL 规则只注册一次
        # Remounting only swaps the handler; the URL rule is registered once
        replacing = endpoint in self._handlers
        self._handlers[endpoint] = handler
        if replacing:
            logger.debug("替换路由处理器: %s %s", method, path)
            return

        self._app.add_url_rule(
            rule,
            endpoint=endpoint,
            view_func=self._make_view(method, path, endpoint),
            methods=[method],
        )
        self._routes.append((method, path))

    def _make_view(self, method: str, path: str, endpoint: str) -> Callable[..., Any]:
        async def view(**params: Any) -> Any:
            handler = self._handlers[endpoint]
            req = g.get("route_request") or await self._build_request(params)
            res = RouteResponse()
            try:
                result = handler(req, res)
                if inspect.isawaitable(result):
                    result = await result
            except HTTPError as exc:
                return jsonify({"error": exc.message}), exc.status_code
            except Exception as exc:
                logger.exception("处理请求出错: %s %s", method, path)
                return self._internal_error(exc)

            if res.sent:
                return jsonify(res.body), res.status_code
            if result is None:
                return "", 204 if res.status_code == 200 else res.status_code
            return jsonify(result), res.status_code

        return view

    async def _build_request(self, params: dict[str, Any]) -> RouteRequest:
        body = await request.get_json(silent=True)
        return RouteRequest(
            method=request.method,
            path=request.path,
            params=dict(params),
            query=dict(request.args),
            body=body,
            headers=dict(request.headers),
        )

    async def _run_middlewares(self) -> Any:
        if not self._middlewares:
            return None
        req = await self._build_request(request.view_args or {})
        # 中间件与处理器共享同一个请求对象（如 req.user）
        g.route_request = req
        for middleware in self._middlewares:
            try:
                result = middleware(req)
                if inspect.isawaitable(result):
                    result = await result
            except HTTPError as exc:
                return jsonify({"error": exc.message}), exc.status_code
            except Exception as exc:
                logger.exception("中间件出错: %s", getattr(middleware, "__name__", middleware))
                return self._internal_error(exc)
            if result is not None:
                return jsonify(result)
        return None

    def _internal_error(self, exc: Exception) -> Any:
        payload: dict[str, Any] = {"error": "Internal Server Error"}
        if self._debug:
            payload["message"] = str(exc)
        return jsonify(payload), 500

    async def _not_found(self, error: Exception) -> Any:
        return jsonify({"error": "Not Found"}), 404
