"""
用户模块 - 内存中的用户增删改查
Users module - in-memory user CRUD.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.web.router import HTTPError, RouteRequest, RouteResponse

DEFAULT_USERS = (
    {"name": "John Doe", "email": "john@example.com"},
    {"name": "Jane Smith", "email": "jane@example.com"},
)


@dataclass
class User:
    id: int
    name: str
    email: str


class UserStore:
    """内存用户存储 / In-memory user store."""

    def __init__(self, seed: Iterable[dict[str, str]] = DEFAULT_USERS) -> None:
        self._users: dict[int, User] = {}
        for data in seed:
            self.create(data["name"], data["email"])

    def get_all(self) -> list[User]:
        return list(self._users.values())

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def create(self, name: str, email: str) -> User:
        user_id = max(self._users, default=0) + 1
        user = User(id=user_id, name=name, email=email)
        self._users[user_id] = user
        return user

    def update(self, user_id: int, name: str | None = None, email: str | None = None) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        return user

    def delete(self, user_id: int) -> bool:
        return self._users.pop(user_id, None) is not None


def _user_id(req: RouteRequest) -> int:
    try:
        return int(req.params["id"])
    except (KeyError, ValueError):
        raise HTTPError(400, "Invalid user id") from None


def create_module(seed: Iterable[dict[str, str]] = DEFAULT_USERS) -> ModuleDefinition:
    store = UserStore(seed)

    def initialize(context: Any) -> None:
        context.get_service("logger", "info")("Users module initialized")

    def routes(app: Any) -> None:
        async def list_users(req: RouteRequest, res: RouteResponse) -> Any:
            return {"users": [asdict(u) for u in store.get_all()]}

        async def get_user(req: RouteRequest, res: RouteResponse) -> Any:
            user = store.find_by_id(_user_id(req))
            if user is None:
                raise HTTPError(404, "User not found")
            return {"user": asdict(user)}

        async def create_user(req: RouteRequest, res: RouteResponse) -> Any:
            body = req.body or {}
            name, email = body.get("name"), body.get("email")
            if not name or not email:
                raise HTTPError(400, "Name and email are required")
            res.status(201)
            return {"user": asdict(store.create(name, email))}

        async def update_user(req: RouteRequest, res: RouteResponse) -> Any:
            body = req.body or {}
            user = store.update(_user_id(req), body.get("name"), body.get("email"))
            if user is None:
                raise HTTPError(404, "User not found")
            return {"user": asdict(user)}

        async def delete_user(req: RouteRequest, res: RouteResponse) -> Any:
            if not store.delete(_user_id(req)):
                raise HTTPError(404, "User not found")
            return {"success": True}

        app.get("/api/users", list_users)
        app.get("/api/users/:id", get_user)
        app.post("/api/users", create_user)
        app.put("/api/users/:id", update_user)
        app.delete("/api/users/:id", delete_user)

    return ModuleDefinition(
        id="users",
        display_name="Users Module",
        dependencies=("logger",),
        initialize=initialize,
        routes=routes,
        services={
            "get_all": store.get_all,
            "find_by_id": store.find_by_id,
            "create": store.create,
            "update": store.update,
            "delete": store.delete,
        },
    )
