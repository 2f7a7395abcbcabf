import json
import os

# до импорта приложения: хранилище по умолчанию не должно создавать файл
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from preorder_cart import models  # noqa: F401
from preorder_cart.database import Base
from preorder_cart.events.bus import CART_UPDATED, EventBus
from preorder_cart.schemas.catalog import MenuItem
from preorder_cart.services.cart_store import CartStore
from preorder_cart.services.catalog_client import CatalogClient
from preorder_cart.services.order_client import OrderClient

BACKEND_URL = "http://backend.test"

RESTAURANTS = [
    {"_id": "hangout-cafe", "name": "Hangout Cafe", "cuisine": "Multi-cuisine"},
    {"_id": "golden-bakery", "name": "Golden Bakery", "cuisine": "Bakery"},
]

MENUS = {
    "hangout-cafe": [
        {"_id": "1", "name": "Margherita Pizza", "price": 299, "category": "Main Course",
         "isAvailable": True, "restaurant": "hangout-cafe"},
        {"_id": "2", "name": "Cappuccino", "price": 89, "category": "Beverages",
         "isAvailable": True, "restaurant": "hangout-cafe"},
    ],
    "golden-bakery": [],
}


class FakeOrderBackend:
    """Принимает POST /api/orders, падает для ресторанов из failing"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if payload["restaurant"] in self.failing:
            return httpx.Response(500, json={"success": False, "message": "Error creating order"})
        return httpx.Response(201, json={"_id": f"order-{len(self.requests)}", **payload})

    @property
    def by_restaurant(self):
        return {payload["restaurant"]: payload for payload in self.requests}


def catalog_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/restaurants":
        return httpx.Response(200, json={"success": True, "restaurants": RESTAURANTS})
    if path.startswith("/api/menu/"):
        restaurant_id = path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"success": True, "menu": MENUS.get(restaurant_id, [])})
    return httpx.Response(404, json={"success": False, "message": "Not found"})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def notifications(bus):
    received = []
    unsubscribe = bus.subscribe(CART_UPDATED, lambda: received.append(CART_UPDATED))
    yield received
    unsubscribe()


@pytest.fixture
def store(db, bus):
    return CartStore(db, bus)


@pytest.fixture
def order_backend():
    return FakeOrderBackend()


@pytest.fixture
def order_client(order_backend):
    return OrderClient(base_url=BACKEND_URL, transport=httpx.MockTransport(order_backend))


@pytest.fixture
def catalog_client():
    return CatalogClient(base_url=BACKEND_URL, transport=httpx.MockTransport(catalog_handler))


@pytest.fixture
def pizza():
    return MenuItem.model_validate({
        "_id": "p1", "name": "Margherita Pizza", "price": 100, "image": "/img/pizza.jpg",
        "description": "Classic tomato and mozzarella pizza", "restaurant": "r1",
    })


@pytest.fixture
def bun():
    return MenuItem.model_validate({
        "_id": "b1", "name": "Cinnamon Bun", "price": 50, "description": "Fresh baked",
        "restaurant": "r2",
    })


@pytest.fixture
def coffee():
    return MenuItem.model_validate({
        "_id": "c1", "name": "Cappuccino", "price": 89, "restaurant": "r1",
    })


@pytest.fixture
def flaky_order_backend():
    return FakeOrderBackend(failing={"r1"})


@pytest.fixture
def flaky_order_client(flaky_order_backend):
    return OrderClient(base_url=BACKEND_URL, transport=httpx.MockTransport(flaky_order_backend))
