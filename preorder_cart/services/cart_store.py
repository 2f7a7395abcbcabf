import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from ..events.bus import CART_UPDATED, EventBus, event_bus
from ..exceptions import IdentityMissingError, StorageParseError
from ..models.cart_storage import CartRecord
from ..schemas.cart_item import CartEntry
from ..schemas.catalog import MenuItem
from .identity import storage_key

logger = logging.getLogger(__name__)

ItemLike = Union[MenuItem, CartEntry, Dict[str, Any]]


class CartStore:
    """
    Корзина пользователя, сохранённая под ключом ``cart_<ключ>``.

    Каждая изменяющая операция целиком перезаписывает сохранённый массив и
    ровно один раз публикует ``cartUpdated``. Блокировок нет: при
    конкурентной записи под одним ключом побеждает последняя.
    """

    def __init__(self, db: Session, bus: EventBus = event_bus):
        self.db = db
        self.bus = bus

    def load(self, key: str) -> List[CartEntry]:
        """Прочитать корзину; повреждённые данные читаются как пустая корзина"""
        key = self._check_key(key)
        return self._read(key)

    def add(self, key: str, item: ItemLike, quantity_delta: int = 1,
            restaurant: Optional[str] = None) -> CartEntry:
        """Добавить товар или увеличить количество уже лежащего в корзине"""
        key = self._check_key(key)
        if quantity_delta < 1:
            raise ValueError("Quantity to add must be at least 1")

        entries = self._read(key)

        # снимок товара берётся только при первом добавлении
        entry = self._find(entries, self._item_id(item))
        if entry is not None:
            entry.quantity += quantity_delta
        else:
            entry = self._snapshot(item, quantity_delta, restaurant)
            entries.append(entry)

        self._write(key, entries)
        logger.info(f"Added item {entry.id} to cart {key} (quantity {entry.quantity})")
        return entry

    def put(self, key: str, item: ItemLike, quantity: int,
            restaurant: Optional[str] = None) -> Optional[CartEntry]:
        """Выставить точное количество, при необходимости добавив товар (окно товара)"""
        key = self._check_key(key)
        entries = self._read(key)

        existing = self._find(entries, self._item_id(item))
        entry = None
        if quantity <= 0:
            if existing is not None:
                entries.remove(existing)
        elif existing is not None:
            existing.quantity = quantity
            entry = existing
        else:
            entry = self._snapshot(item, quantity, restaurant)
            entries.append(entry)

        self._write(key, entries)
        return entry

    def get(self, key: str, item_id: str) -> Optional[CartEntry]:
        """Позиция корзины по id товара или None"""
        key = self._check_key(key)
        return self._find(self._read(key), item_id)

    def set_quantity(self, key: str, item_id: str, new_quantity: int) -> Optional[CartEntry]:
        """Изменить количество; при значении <= 0 позиция удаляется"""
        key = self._check_key(key)
        entries = self._read(key)
        existing = self._find(entries, item_id)

        entry = None
        if existing is not None:
            if new_quantity <= 0:
                entries.remove(existing)
                logger.info(f"Removed item {item_id} from cart {key} (quantity {new_quantity})")
            else:
                existing.quantity = new_quantity
                entry = existing
        else:
            logger.warning(f"Item {item_id} not found in cart {key}")

        self._write(key, entries)
        return entry

    def adjust(self, key: str, item_id: str, change: int) -> Optional[CartEntry]:
        """Кнопки +/-: изменить количество на change"""
        key = self._check_key(key)
        existing = self._find(self._read(key), item_id)
        current = existing.quantity if existing is not None else 0
        return self.set_quantity(key, item_id, current + change)

    def remove(self, key: str, item_id: str) -> bool:
        key = self._check_key(key)
        entries = self._read(key)
        existing = self._find(entries, item_id)
        if existing is not None:
            entries.remove(existing)

        self._write(key, entries)
        return existing is not None

    def clear(self, key: str) -> int:
        """Удалить все позиции, вернуть число удалённых"""
        key = self._check_key(key)
        items_count = len(self._read(key))

        record = self.db.get(CartRecord, storage_key(key))
        if record is not None:
            self.db.delete(record)
        self.db.commit()
        self.bus.publish(CART_UPDATED)

        logger.info(f"Cart cleared for {key}: {items_count} items removed")
        return items_count

    def replace(self, key: str, entries: List[CartEntry]) -> None:
        """Перезаписать корзину целиком (после частично неудачного оформления)"""
        key = self._check_key(key)
        self._write(key, list(entries))

    def total_quantity(self, key: str) -> int:
        return sum(entry.quantity for entry in self.load(key))

    def total_amount(self, key: str) -> float:
        return sum(entry.price * entry.quantity for entry in self.load(key))

    @staticmethod
    def _check_key(key: Optional[str]) -> str:
        if key is None or not str(key).strip():
            raise IdentityMissingError()
        return str(key)

    @staticmethod
    def _find(entries: List[CartEntry], item_id: str) -> Optional[CartEntry]:
        return next((entry for entry in entries if entry.id == str(item_id)), None)

    @staticmethod
    def _item_id(item: ItemLike) -> str:
        if isinstance(item, BaseModel):
            item_id = getattr(item, "id", None)
        else:
            item_id = item.get("id", item.get("_id"))
        if item_id is None or not str(item_id).strip():
            raise ValueError("Item has no id")
        return str(item_id)

    @staticmethod
    def _snapshot(item: ItemLike, quantity: int, restaurant: Optional[str]) -> CartEntry:
        data = item.model_dump() if isinstance(item, BaseModel) else dict(item)
        if "id" not in data and "_id" in data:
            data["id"] = data.pop("_id")
        data["quantity"] = quantity
        data["restaurant"] = restaurant or data.get("restaurant")
        if not data["restaurant"]:
            raise ValueError(f"Item {data.get('id')} has no owning restaurant")
        return CartEntry.model_validate(data)

    def _read(self, key: str) -> List[CartEntry]:
        skey = storage_key(key)
        record = self.db.get(CartRecord, skey)
        if record is None:
            return []

        try:
            raw = json.loads(record.value)
            if not isinstance(raw, list):
                raise ValueError("expected a JSON array")
        except (TypeError, ValueError) as e:
            logger.warning(f"{StorageParseError(skey, str(e))}; treating cart as empty")
            return []

        entries = []
        for raw_entry in raw:
            try:
                entries.append(CartEntry.model_validate(raw_entry))
            except ValidationError as e:
                logger.warning(f"Skipping invalid entry in {skey}: {e}")
        return entries

    def _write(self, key: str, entries: List[CartEntry]) -> None:
        skey = storage_key(key)
        value = json.dumps([entry.model_dump(mode="json") for entry in entries])

        record = self.db.get(CartRecord, skey)
        if record is None:
            self.db.add(CartRecord(key=skey, value=value))
        else:
            record.value = value
        self.db.commit()

        self.bus.publish(CART_UPDATED)
