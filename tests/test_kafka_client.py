import asyncio
import json

import pytest

from preorder_cart.schemas.cart_item import CartEntry
from preorder_cart.schemas.order import CheckoutResult, OrderOutcome
from preorder_cart.services import kafka_client as kafka_module
from preorder_cart.services.kafka_client import KafkaClient


class FakeProducer:
    """Подменяет AIOKafkaProducer: запоминает отправленные сообщения"""

    def __init__(self, **config):
        self.config = config
        self.started = False
        self.stopped = False
        self.sent = []

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def send_and_wait(self, topic, value=None, key=None):
        self.sent.append((topic, value, key))


class BrokenProducer(FakeProducer):
    async def start(self):
        raise ConnectionError("no brokers")


@pytest.fixture
def fake_producer(monkeypatch):
    monkeypatch.setattr(kafka_module, "AIOKafkaProducer", FakeProducer)


@pytest.fixture
def entry():
    return CartEntry(id="p1", name="Margherita Pizza", price=100, quantity=2, restaurant="r1")


def test_events_are_skipped_without_producer(entry):
    kafka = KafkaClient(topic_prefix="cart")

    assert asyncio.run(kafka.item_added("u1", entry, 2)) is False


def test_start_publish_and_stop(fake_producer, entry):
    kafka = KafkaClient(bootstrap_servers="kafka:9092", topic_prefix="preorder.cart")

    async def scenario():
        await kafka.start_producer()
        producer = kafka.producer
        assert await kafka.item_added("u1", entry, 2) is True
        await kafka.stop_producer()
        return producer

    producer = asyncio.run(scenario())

    assert producer.started and producer.stopped
    assert producer.config["bootstrap_servers"] == "kafka:9092"
    assert kafka.producer is None

    topic, event, key = producer.sent[0]
    assert topic == "preorder.cart.item.added"
    assert key == "u1"
    assert event["event_type"] == "item_added"
    assert event["cart_key"] == "u1"
    assert event["payload"] == {
        "item": {"item_id": "p1", "restaurant": "r1", "quantity": 2, "price": 100, "total_price": 200},
        "added": 2,
    }
    assert event["event_id"] and event["occurred_at"]
    assert json.loads(producer.config["value_serializer"](event)) == event
    assert producer.config["key_serializer"]("u1") == b"u1"


def test_checkout_envelope_comes_from_result(fake_producer):
    kafka = KafkaClient(topic_prefix="cart")
    result = CheckoutResult(
        cart_key="u1",
        outcomes=[
            OrderOutcome(restaurant_id="r1", success=True, order={"_id": "order-1"}),
            OrderOutcome(restaurant_id="r2", success=False, error="Failed to place order for restaurant r2"),
        ],
        cleared=False,
        retained_items=1,
    )

    async def scenario():
        await kafka.start_producer()
        await kafka.checkout_completed(result)
        return kafka.producer.sent

    topic, event, key = asyncio.run(scenario())[0]

    assert topic == "cart.checkout.completed"
    assert key == "u1"
    assert event["payload"]["failed_restaurants"] == ["r2"]
    assert event["payload"]["retained_items"] == 1
    assert [(o["restaurant"], o["order_id"]) for o in event["payload"]["orders"]] == [("r1", "order-1"), ("r2", None)]


def test_failed_start_leaves_client_disabled(monkeypatch, entry):
    monkeypatch.setattr(kafka_module, "AIOKafkaProducer", BrokenProducer)
    kafka = KafkaClient(topic_prefix="cart")

    with pytest.raises(ConnectionError):
        asyncio.run(kafka.start_producer())
    assert kafka.producer is None
    assert asyncio.run(kafka.cart_cleared("u1", 3)) is False
