import asyncio
import logging
from typing import Dict, List, Optional

from ..config import settings
from ..exceptions import EmptyCartError, OrderSubmissionError
from ..schemas.cart_item import CartEntry
from ..schemas.order import CheckoutResult, OrderDraft, OrderItem, OrderOutcome
from .cart_store import CartStore
from .order_client import OrderClient

logger = logging.getLogger(__name__)

CLEAR_ALWAYS = "always"
CLEAR_SUCCEEDED_ONLY = "succeeded_only"
CLEAR_POLICIES = (CLEAR_ALWAYS, CLEAR_SUCCEEDED_ONLY)


def build_order_drafts(entries: List[CartEntry], customer_name: str) -> List[OrderDraft]:
    """Разбить корзину на заказы по ресторанам (в порядке первого появления)"""
    groups: Dict[str, List[OrderItem]] = {}
    for entry in entries:
        groups.setdefault(entry.restaurant, []).append(
            OrderItem(item_id=entry.id, quantity=entry.quantity)
        )

    return [
        OrderDraft(customer_name=customer_name, restaurant=restaurant_id, items=items)
        for restaurant_id, items in groups.items()
    ]


class CheckoutOrchestrator:
    """
    Оформление заказа: один запрос на создание заказа для каждого ресторана
    в корзине. Запросы независимы, ошибка одного не мешает остальным.

    После завершения всех запросов корзина очищается полностью (политика
    ``always``) либо в ней остаются позиции ресторанов, для которых заказ
    не прошёл (``succeeded_only``).
    """

    def __init__(self, store: CartStore, order_client: Optional[OrderClient] = None,
                 clear_policy: Optional[str] = None):
        self.store = store
        self.order_client = order_client or OrderClient()
        self.clear_policy = clear_policy or settings.checkout_clear_policy
        if self.clear_policy not in CLEAR_POLICIES:
            raise ValueError(f"Unknown checkout clear policy: {self.clear_policy}")

    async def checkout(self, key: str, customer_name: str) -> CheckoutResult:
        entries = self.store.load(key)
        if not entries:
            raise EmptyCartError()

        drafts = build_order_drafts(entries, customer_name)
        logger.info(f"Checkout for cart {key}: {len(drafts)} order(s) to place")

        outcomes = list(await asyncio.gather(*(self._submit(draft) for draft in drafts)))
        failed = {outcome.restaurant_id for outcome in outcomes if not outcome.success}

        if failed and self.clear_policy == CLEAR_SUCCEEDED_ONLY:
            retained = [entry for entry in entries if entry.restaurant in failed]
            self.store.replace(key, retained)
            logger.warning(
                f"Checkout for cart {key}: kept {len(retained)} item(s) "
                f"of failed restaurants {sorted(failed)}"
            )
            return CheckoutResult(cart_key=key, outcomes=outcomes, cleared=False,
                                  retained_items=len(retained))

        self.store.clear(key)
        if failed:
            logger.warning(f"Checkout for cart {key}: orders failed for {sorted(failed)}, cart cleared")
        return CheckoutResult(cart_key=key, outcomes=outcomes, cleared=True)

    async def _submit(self, draft: OrderDraft) -> OrderOutcome:
        try:
            order = await self.order_client.submit(draft)
        except OrderSubmissionError as e:
            return OrderOutcome(restaurant_id=draft.restaurant, success=False, error=str(e))
        except Exception as e:
            # любой сбой остаётся внутри своего ресторана, остальные заказы дожидаются
            logger.error(f"❌ Unexpected error placing order for restaurant {draft.restaurant}: {e}")
            error = OrderSubmissionError(draft.restaurant, f"{e.__class__.__name__}: {e}")
            return OrderOutcome(restaurant_id=draft.restaurant, success=False, error=str(error))
        return OrderOutcome(restaurant_id=draft.restaurant, success=True, order=order)
