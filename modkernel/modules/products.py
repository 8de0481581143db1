"""
商品模块 - 内存商品目录
Products module - in-memory product catalog.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.web.router import HTTPError, RouteRequest, RouteResponse


@dataclass
class Product:
    id: int
    name: str
    price: float


def create_module() -> ModuleDefinition:
    catalog: dict[int, Product] = {}

    def add_product(name: str, price: float) -> Product:
        product = Product(id=max(catalog, default=0) + 1, name=name, price=float(price))
        catalog[product.id] = product
        return product

    def describe(data: str) -> str:
        return f"Processed by Products: {data}"

    def initialize(context: Any) -> None:
        context.get_service("logger", "info")("Products module initialized")

    def routes(app: Any) -> None:
        async def list_products(req: RouteRequest, res: RouteResponse) -> Any:
            return {"products": [asdict(p) for p in catalog.values()]}

        async def create_product(req: RouteRequest, res: RouteResponse) -> Any:
            body = req.body or {}
            if not body.get("name") or body.get("price") is None:
                raise HTTPError(400, "Name and price are required")
            try:
                product = add_product(body["name"], body["price"])
            except (TypeError, ValueError):
                raise HTTPError(400, "Price must be a number") from None
            res.status(201)
            return {"product": asdict(product)}

        app.get("/api/products", list_products)
        app.post("/api/products", create_product)

    def shutdown(context: Any) -> None:
        catalog.clear()

    return ModuleDefinition(
        id="products",
        display_name="Products Module",
        dependencies=("logger",),
        initialize=initialize,
        shutdown=shutdown,
        routes=routes,
        services={
            "list": lambda: list(catalog.values()),
            "add": add_product,
            "describe": describe,
        },
    )
