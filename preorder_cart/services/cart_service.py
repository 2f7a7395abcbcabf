import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..events.bus import EventBus, event_bus
from ..exceptions import CartItemNotFoundError
from ..schemas.cart import CartCount, CartSummary
from ..schemas.cart_item import CartEntry, CartItemAdjust, CartItemCreate, CartItemUpdate
from ..schemas.identity import Identity
from ..schemas.order import CheckoutResult
from .cart_store import CartStore
from .checkout import CheckoutOrchestrator
from .identity import display_name, require_cart_key
from .kafka_client import KafkaClient, kafka_client
from .order_client import OrderClient

logger = logging.getLogger(__name__)


class CartService:
    """Операции с корзиной от имени пользователя (для HTTP-слоя)"""

    def __init__(self, db: Session, order_client: Optional[OrderClient] = None,
                 bus: EventBus = event_bus, kafka: KafkaClient = kafka_client):
        self.store = CartStore(db, bus)
        self.checkout_orchestrator = CheckoutOrchestrator(self.store, order_client)
        self.kafka = kafka

    def get_cart(self, identity: Optional[Identity]) -> CartSummary:
        """Получить корзину с подсчётом итогов"""
        key = require_cart_key(identity)
        items = self.store.load(key)

        return CartSummary(
            cart_key=key,
            items=items,
            total_items=sum(item.quantity for item in items),
            total_amount=sum(item.price * item.quantity for item in items)
        )

    def count(self, identity: Optional[Identity]) -> CartCount:
        key = require_cart_key(identity)
        return CartCount(cart_key=key, total_items=self.store.total_quantity(key))

    async def add_item(self, identity: Optional[Identity], item_data: CartItemCreate) -> CartEntry:
        """Добавить товар в корзину"""
        key = require_cart_key(identity)
        entry = self.store.add(key, item_data.item, item_data.quantity, restaurant=item_data.restaurant)

        await self.kafka.item_added(key, entry, item_data.quantity)
        return entry

    async def update_item(self, identity: Optional[Identity], item_id: str,
                          item_data: CartItemUpdate) -> Optional[CartEntry]:
        """
        Обновить количество товара; при количестве <= 0 товар удаляется
        (тогда возвращается None). Товара нет в корзине: CartItemNotFoundError.
        """
        key = require_cart_key(identity)
        self._require_item(key, item_id)

        entry = self.store.set_quantity(key, item_id, item_data.quantity)
        await self._publish_item_changed(key, item_id, entry)
        return entry

    async def adjust_item(self, identity: Optional[Identity], item_id: str,
                          item_data: CartItemAdjust) -> Optional[CartEntry]:
        key = require_cart_key(identity)
        self._require_item(key, item_id)

        entry = self.store.adjust(key, item_id, item_data.change)
        await self._publish_item_changed(key, item_id, entry)
        return entry

    async def remove_item(self, identity: Optional[Identity], item_id: str) -> bool:
        """Удалить товар из корзины"""
        key = require_cart_key(identity)
        removed = self.store.remove(key, item_id)
        if removed:
            await self.kafka.item_removed(key, item_id)
        return removed

    async def clear_cart(self, identity: Optional[Identity]) -> int:
        """Очистить корзину"""
        key = require_cart_key(identity)
        items_count = self.store.clear(key)

        await self.kafka.cart_cleared(key, items_count)
        return items_count

    async def checkout(self, identity: Optional[Identity]) -> CheckoutResult:
        """Оформление заказа: по одному заказу на каждый ресторан"""
        key = require_cart_key(identity)
        result = await self.checkout_orchestrator.checkout(key, display_name(identity))

        await self.kafka.checkout_completed(result)
        logger.info(
            f"🛒 Checkout for {key}: {len(result.outcomes)} order(s), "
            f"failed: {result.failed_restaurants or 'none'}"
        )
        return result

    def _require_item(self, key: str, item_id: str) -> CartEntry:
        existing = self.store.get(key, item_id)
        if existing is None:
            logger.warning(f"Item {item_id} not found in cart {key}")
            raise CartItemNotFoundError(item_id)
        return existing

    async def _publish_item_changed(self, key: str, item_id: str, entry: Optional[CartEntry]):
        if entry is None:
            await self.kafka.item_removed(key, item_id)
        else:
            await self.kafka.item_updated(key, entry)
