import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from aiokafka import AIOKafkaProducer

from ..config import settings
from ..schemas.cart_item import CartEntry
from ..schemas.order import CheckoutResult

logger = logging.getLogger(__name__)

# тип события -> суффикс топика (полное имя: "<префикс>.<суффикс>")
EVENT_TOPICS = {
    "item_added": "item.added",
    "item_updated": "item.updated",
    "item_removed": "item.removed",
    "cart_cleared": "cleared",
    "checkout_completed": "checkout.completed",
}


def entry_payload(entry: CartEntry) -> Dict[str, Any]:
    return {
        "item_id": entry.id,
        "restaurant": entry.restaurant,
        "quantity": entry.quantity,
        "price": entry.price,
        "total_price": entry.price * entry.quantity,
    }


def checkout_payload(result: CheckoutResult) -> Dict[str, Any]:
    return {
        "cleared": result.cleared,
        "retained_items": result.retained_items,
        "failed_restaurants": result.failed_restaurants,
        "orders": [
            {
                "restaurant": outcome.restaurant_id,
                "success": outcome.success,
                "order_id": (outcome.order or {}).get("_id"),
                "error": outcome.error,
            }
            for outcome in result.outcomes
        ],
    }


class KafkaClient:
    """
    Пересылка изменений корзины в Kafka для других сервисов.

    Пока продюсер не запущен (Kafka выключена или недоступна), события
    молча пропускаются: корзина от Kafka не зависит. Ключ сообщения это
    ключ корзины, поэтому события одной корзины попадают в одну партицию.
    """

    def __init__(self, bootstrap_servers: Optional[str] = None, topic_prefix: Optional[str] = None):
        self.producer: Optional[AIOKafkaProducer] = None
        self.bootstrap_servers = bootstrap_servers or settings.kafka_bootstrap_servers
        self.topic_prefix = topic_prefix or settings.kafka_topic_prefix

    def topic_for(self, event_type: str) -> str:
        return f"{self.topic_prefix}.{EVENT_TOPICS[event_type]}"

    async def start_producer(self):
        """Запуск Kafka продюсера"""
        producer = AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda k: k.encode("utf-8"),
            acks="all",
            enable_idempotence=True
        )
        try:
            await producer.start()
        except Exception as e:
            logger.error(f"❌ Failed to start Kafka producer ({self.bootstrap_servers}): {e}")
            raise
        self.producer = producer
        logger.info(f"✅ Kafka producer started, topics under '{self.topic_prefix}.*'")

    async def stop_producer(self):
        """Остановка Kafka продюсера"""
        if not self.producer:
            return
        try:
            await self.producer.stop()
            logger.info("✅ Kafka producer stopped")
        except Exception as e:
            logger.error(f"❌ Error stopping Kafka producer: {e}")
        finally:
            self.producer = None

    async def item_added(self, cart_key: str, entry: CartEntry, added: int) -> bool:
        return await self._send("item_added", cart_key, {"item": entry_payload(entry), "added": added})

    async def item_updated(self, cart_key: str, entry: CartEntry) -> bool:
        return await self._send("item_updated", cart_key, {"item": entry_payload(entry)})

    async def item_removed(self, cart_key: str, item_id: str) -> bool:
        return await self._send("item_removed", cart_key, {"item_id": item_id})

    async def cart_cleared(self, cart_key: str, items_removed: int) -> bool:
        return await self._send("cart_cleared", cart_key, {"items_removed": items_removed})

    async def checkout_completed(self, result: CheckoutResult) -> bool:
        return await self._send("checkout_completed", result.cart_key, checkout_payload(result))

    async def _send(self, event_type: str, cart_key: str, payload: Dict[str, Any]) -> bool:
        if not self.producer:
            logger.debug(f"Kafka producer not started, skipping {event_type} for cart {cart_key}")
            return False

        topic = self.topic_for(event_type)
        event = {
            "event_id": str(uuid.uuid4()),
            "event_type": event_type,
            "occurred_at": datetime.now(timezone.utc).isoformat(),
            "cart_key": cart_key,
            "payload": payload,
        }
        try:
            await self.producer.send_and_wait(topic, value=event, key=cart_key)
        except Exception as e:
            # сбой пересылки не откатывает уже сохранённую корзину
            logger.error(f"❌ Error publishing {event_type} to {topic}: {e}")
            return False

        logger.info(f"📤 {event_type} for cart {cart_key} -> {topic}")
        return True


# Глобальный экземпляр клиента
kafka_client = KafkaClient()
