import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, discount_router, order_router


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(cart_router)
    app.include_router(discount_router)
    app.include_router(order_router)
    return TestClient(app)
