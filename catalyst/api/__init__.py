# catalyst/api/__init__.py
from fastapi import FastAPI

from catalyst.api.routers import cart, coupons, health, orders, products


def create_app() -> FastAPI:
    app = FastAPI(
        title="Catalyst Store",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(coupons.router)
    app.include_router(cart.router)
    app.include_router(orders.router)

    return app
