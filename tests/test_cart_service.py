import asyncio

import pytest

from preorder_cart.exceptions import CartItemNotFoundError
from preorder_cart.schemas.cart_item import CartItemAdjust, CartItemCreate, CartItemUpdate
from preorder_cart.schemas.identity import Identity
from preorder_cart.services.cart_service import CartService
from preorder_cart.services.kafka_client import KafkaClient

USER = Identity(uid="u1", name="Alice")


class SentEvents:
    """Продюсер, который только запоминает топики"""

    def __init__(self):
        self.topics = []

    async def send_and_wait(self, topic, value=None, key=None):
        self.topics.append(topic)


@pytest.fixture
def sent():
    return SentEvents()


@pytest.fixture
def service(db, bus, order_client, sent):
    kafka = KafkaClient(topic_prefix="cart")
    kafka.producer = sent
    return CartService(db, order_client, bus, kafka)


def test_update_of_missing_item_changes_nothing(service, sent, notifications, pizza):
    asyncio.run(service.add_item(USER, CartItemCreate(item=pizza)))
    notifications.clear()
    sent.topics.clear()

    with pytest.raises(CartItemNotFoundError):
        asyncio.run(service.update_item(USER, "ghost", CartItemUpdate(quantity=5)))
    with pytest.raises(CartItemNotFoundError):
        asyncio.run(service.adjust_item(USER, "ghost", CartItemAdjust(change=-1)))

    assert sent.topics == []
    assert notifications == []
    assert service.get_cart(USER).total_items == 1


def test_item_changes_are_forwarded(service, sent, pizza):
    asyncio.run(service.add_item(USER, CartItemCreate(item=pizza, quantity=2)))

    entry = asyncio.run(service.adjust_item(USER, "p1", CartItemAdjust(change=1)))
    assert entry.quantity == 3

    assert asyncio.run(service.update_item(USER, "p1", CartItemUpdate(quantity=0))) is None
    assert asyncio.run(service.remove_item(USER, "p1")) is False

    assert sent.topics == ["cart.item.added", "cart.item.updated", "cart.item.removed"]


def test_checkout_is_forwarded_once(service, sent, order_backend, pizza, bun):
    asyncio.run(service.add_item(USER, CartItemCreate(item=pizza)))
    asyncio.run(service.add_item(USER, CartItemCreate(item=bun)))
    sent.topics.clear()

    result = asyncio.run(service.checkout(USER))

    assert result.cleared is True
    assert order_backend.by_restaurant["r1"]["customerName"] == "Alice"
    assert sent.topics == ["cart.checkout.completed"]
