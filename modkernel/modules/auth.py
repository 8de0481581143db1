"""
认证模块 - 内存账户、会话令牌与请求认证中间件
Auth module - in-memory accounts, session tokens and request authentication.

令牌通过 "Authorization: Bearer <token>" 头传递。
Tokens travel in the "Authorization: Bearer <token>" header.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.utils.dotpath import get_path
from modkernel.web.router import HTTPError, RouteRequest, RouteResponse

SESSION_TTL = timedelta(hours=24)

DEFAULT_ADMIN = {"username": "admin", "password": "admin123", "roles": ("admin",)}

# 即使位于受保护前缀下也无需令牌的路径
PUBLIC_PATHS = ("/api/auth/login", "/api/auth/register")


def hash_password(password: str) -> str:
    """密码哈希 / Hash password."""
    return hashlib.sha256(password.encode()).hexdigest()


def bearer_token(headers: Mapping[str, str]) -> str | None:
    """从请求头取出 Bearer 令牌 / Extract the bearer token from headers."""
    for key, value in headers.items():
        if key.lower() == "authorization":
            scheme, _, token = value.partition(" ")
            if scheme.lower() == "bearer" and token.strip():
                return token.strip()
            return None
    return None


def _matches(path: str, prefixes: Iterable[str]) -> bool:
    for prefix in prefixes:
        base = prefix.rstrip("/")
        if path == prefix or path == base or path.startswith(base + "/"):
            return True
    return False


@dataclass
class Account:
    id: str
    username: str
    password_hash: str
    roles: list[str]
    created_at: datetime = field(default_factory=datetime.now)

    def public(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "roles": list(self.roles)}


@dataclass
class Session:
    token: str
    account_id: str
    created_at: datetime
    expires_at: datetime


class AuthStore:
    """
    内存账户与会话存储
    In-memory account and session store.
    """

    def __init__(self, session_ttl: timedelta = SESSION_TTL) -> None:
        self._session_ttl = session_ttl
        self._accounts: dict[str, Account] = {}
        self._sessions: dict[str, Session] = {}

    def find_by_username(self, username: str) -> Account | None:
        for account in self._accounts.values():
            if account.username == username:
                return account
        return None

    def register(
        self, username: str, password: str, roles: Iterable[str] = ("user",)
    ) -> Account:
        """注册账户，用户名重复时抛出 ValueError / Register; ValueError on a taken name."""
        if self.find_by_username(username) is not None:
            raise ValueError(f"Username {username!r} already exists")
        account = Account(
            id=uuid.uuid4().hex,
            username=username,
            password_hash=hash_password(password),
            roles=list(roles),
        )
        self._accounts[account.id] = account
        return account

    def ensure_admin(self) -> bool:
        """没有任何账户时创建默认管理员 / Seed the default admin into an empty store."""
        if self._accounts:
            return False
        self.register(
            DEFAULT_ADMIN["username"], DEFAULT_ADMIN["password"], DEFAULT_ADMIN["roles"]
        )
        return True

    def login(self, username: str, password: str) -> Session | None:
        account = self.find_by_username(username)
        if account is None or account.password_hash != hash_password(password):
            return None
        now = datetime.now()
        session = Session(
            token=secrets.token_hex(32),
            account_id=account.id,
            created_at=now,
            expires_at=now + self._session_ttl,
        )
        self._sessions[session.token] = session
        return session

    def logout(self, token: str | None) -> bool:
        return token is not None and self._sessions.pop(token, None) is not None

    def session_account(self, token: str | None) -> tuple[Session | None, Account | None]:
        """
        查找令牌对应的会话和账户，过期或失效的会话会被移除
        Look up a token's session and account; stale sessions are dropped.
        """
        if not token:
            return None, None
        session = self._sessions.get(token)
        if session is None:
            return None, None
        if session.expires_at < datetime.now():
            del self._sessions[token]
            return session, None
        account = self._accounts.get(session.account_id)
        if account is None:
            del self._sessions[token]
        return session, account

    def authenticate(self, token: str | None) -> dict[str, Any] | None:
        _, account = self.session_account(token)
        return account.public() if account is not None else None

    def has_role(self, token: str | None, role: str) -> bool:
        user = self.authenticate(token)
        return user is not None and role in user["roles"]


def create_module(
    protected_paths: Iterable[str] = (),
    session_ttl: timedelta = SESSION_TTL,
) -> ModuleDefinition:
    store = AuthStore(session_ttl)
    # 由配置 auth.protected_paths 覆盖
    protected = list(protected_paths)

    def require_auth(paths: Iterable[str] | None = None) -> Any:
        """
        创建认证中间件；paths 为空时保护所有路径
        Build authentication middleware; protects every path when paths is None.
        """
        prefixes = None if paths is None else tuple(paths)

        def middleware(req: RouteRequest) -> None:
            if prefixes is not None and not _matches(req.path, prefixes):
                return
            user = store.authenticate(bearer_token(req.headers))
            if user is None:
                raise HTTPError(401, "Unauthorized")
            req.user = user

        return middleware

    def require_role(roles: str | Iterable[str], paths: Iterable[str] | None = None) -> Any:
        """创建角色授权中间件 / Build role-based authorization middleware."""
        required = [roles] if isinstance(roles, str) else list(roles)
        authenticate = require_auth(paths)

        def middleware(req: RouteRequest) -> None:
            authenticate(req)
            if req.user is not None and not any(r in req.user["roles"] for r in required):
                raise HTTPError(403, "Forbidden")

        return middleware

    def authenticate_request(req: RouteRequest) -> None:
        # 携带有效令牌的请求总会得到 req.user
        user = store.authenticate(bearer_token(req.headers))
        if user is not None:
            req.user = user
            return
        if _matches(req.path, protected) and not _matches(req.path, PUBLIC_PATHS):
            raise HTTPError(401, "Unauthorized")

    def initialize(context: Any) -> None:
        info = context.get_service("logger", "info")
        configured = get_path(context.config, "auth.protected_paths")
        if configured is not None:
            protected[:] = list(configured)
        info("Authentication module initialized")
        if store.ensure_admin():
            info("Default admin user created")

    def routes(app: Any) -> None:
        async def login(req: RouteRequest, res: RouteResponse) -> Any:
            body = req.body or {}
            session = store.login(str(body.get("username", "")), str(body.get("password", "")))
            if session is None:
                raise HTTPError(401, "Invalid username or password")
            _, account = store.session_account(session.token)
            return {
                "user": account.public(),
                "token": session.token,
                "expires_at": session.expires_at.isoformat(),
            }

        async def logout(req: RouteRequest, res: RouteResponse) -> Any:
            store.logout(bearer_token(req.headers))
            return {"success": True}

        async def me(req: RouteRequest, res: RouteResponse) -> Any:
            session, account = store.session_account(bearer_token(req.headers))
            if session is None:
                raise HTTPError(401, "Unauthorized")
            if session.expires_at < datetime.now():
                raise HTTPError(401, "Session expired")
            if account is None:
                raise HTTPError(404, "User not found")
            return account.public()

        async def register(req: RouteRequest, res: RouteResponse) -> Any:
            body = req.body or {}
            username, password = body.get("username"), body.get("password")
            if not username or not password:
                raise HTTPError(400, "Username and password are required")
            try:
                account = store.register(username, password)
            except ValueError:
                raise HTTPError(409, "Username already exists") from None
            return account.public()

        app.post("/api/auth/login", login)
        app.post("/api/auth/logout", logout)
        app.get("/api/auth/me", me)
        app.post("/api/auth/register", register)
        app.use(authenticate_request)

    return ModuleDefinition(
        id="auth",
        display_name="Authentication Module",
        dependencies=("logger",),
        initialize=initialize,
        routes=routes,
        services={
            "authenticate": store.authenticate,
            "has_role": store.has_role,
            "require_auth": require_auth,
            "require_role": require_role,
        },
    )
