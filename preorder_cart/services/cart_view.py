import logging
from typing import Callable, List, Optional

from ..events.bus import CART_UPDATED, EventBus, event_bus
from ..schemas.cart_item import CartEntry
from ..schemas.identity import Identity
from .cart_store import CartStore
from .identity import require_cart_key

logger = logging.getLogger(__name__)


class CartView:
    """
    Представление корзины для текущего пользователя (счётчик в шапке,
    страница корзины). Подписывается на ``cartUpdated`` при входе и
    перечитывает хранилище на каждое уведомление; при выходе очищается и
    отписывается, чтобы обработчик не держал ключ прежнего пользователя.
    """

    def __init__(self, store: CartStore, bus: EventBus = event_bus):
        self.store = store
        self.bus = bus
        self.cart_key: Optional[str] = None
        self.items: List[CartEntry] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    def sign_in(self, identity: Optional[Identity]) -> str:
        key = require_cart_key(identity)
        self.sign_out()

        self.cart_key = key
        self._unsubscribe = self.bus.subscribe(CART_UPDATED, self.refresh)
        self.refresh()
        logger.info(f"Cart view attached to {key}")
        return key

    def sign_out(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.cart_key = None
        self.items = []

    def refresh(self) -> None:
        if self.cart_key is None:
            self.items = []
            return
        self.items = self.store.load(self.cart_key)

    @property
    def count(self) -> int:
        return sum(entry.quantity for entry in self.items)

    @property
    def total(self) -> float:
        return sum(entry.price * entry.quantity for entry in self.items)
