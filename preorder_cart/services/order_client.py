import httpx
import logging
from typing import Any, Dict, Optional

from ..config import settings
from ..exceptions import OrderSubmissionError
from ..schemas.order import OrderDraft

logger = logging.getLogger(__name__)


class OrderClient:
    """Клиент для создания заказов в backend"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.catalog_service_url).rstrip("/")
        self.timeout = timeout or settings.order_timeout
        self.transport = transport

    async def submit(self, draft: OrderDraft) -> Dict[str, Any]:
        """Отправить один черновик заказа; при ошибке OrderSubmissionError"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/api/orders", json=draft.to_payload())
        except httpx.TimeoutException:
            logger.error(f"Timeout placing order for restaurant {draft.restaurant}")
            raise OrderSubmissionError(draft.restaurant, "timeout")
        except httpx.HTTPError as e:
            logger.error(f"Error placing order for restaurant {draft.restaurant}: {e}")
            raise OrderSubmissionError(draft.restaurant, str(e))

        if response.status_code not in (200, 201):
            logger.error(
                f"Failed to place order for restaurant {draft.restaurant}: "
                f"{response.status_code} {response.text}"
            )
            raise OrderSubmissionError(draft.restaurant, f"status {response.status_code}")

        try:
            order = response.json()
        except ValueError:
            order = {}

        logger.info(f"Order placed for restaurant {draft.restaurant}")
        return order if isinstance(order, dict) else {"order": order}
