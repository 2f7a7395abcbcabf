import httpx
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..config import settings
from ..exceptions import CatalogFetchError
from ..schemas.catalog import MenuItem, Restaurant

logger = logging.getLogger(__name__)

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def slugify(text: Optional[str]) -> str:
    """'Golden Bakery' -> 'golden-bakery'"""
    if not text:
        return ""
    slug = re.sub(r"\s+", "-", text.lower())
    return re.sub(r"[^\w-]", "", slug)


def find_restaurant_identifier(human_text: str, restaurants: Sequence[Restaurant]) -> Optional[str]:
    """
    Подбирает id ресторана по тексту: точное совпадение id, затем совпадение
    slug с id или названием ресторана. None, если ничего не нашлось.
    """
    if not human_text:
        return None

    for restaurant in restaurants:
        if restaurant.id == human_text:
            return restaurant.id

    slug = slugify(human_text)
    for restaurant in restaurants:
        if slug in (slugify(restaurant.id), slugify(restaurant.name)):
            return restaurant.id

    return None


def match_restaurant_identifier(human_text: str, restaurants: Sequence[Restaurant]) -> str:
    """То же, но без совпадения текст возвращается как есть (без гарантии, что ресторан есть)"""
    return find_restaurant_identifier(human_text, restaurants) or human_text


class CatalogClient:
    """Клиент для получения ресторанов и меню"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.catalog_service_url).rstrip("/")
        self.timeout = timeout or settings.catalog_timeout
        self.transport = transport

    async def get_restaurants(self) -> List[Restaurant]:
        """Получить список ресторанов"""
        data = await self._get_json("/api/restaurants")
        raw = self._unwrap(data, "restaurants")
        return self._parse(raw, Restaurant, "restaurants")

    async def get_menu(self, restaurant_identifier: str, exact: bool = False) -> List[MenuItem]:
        """
        Получить меню ресторана по id или slug. С ``exact=True`` идентификатор
        уже известный id ресторана и в путь попадает как есть.
        """
        if exact or OBJECT_ID_RE.match(restaurant_identifier or ""):
            restaurant_ref = restaurant_identifier
        else:
            restaurant_ref = slugify(restaurant_identifier)
        if not restaurant_ref:
            return []

        data = await self._get_json(f"/api/menu/{restaurant_ref}")
        raw = self._unwrap(data, "menu")
        items = self._parse(raw, MenuItem, f"menu of {restaurant_ref}")
        for item in items:
            if not item.restaurant:
                item.restaurant = restaurant_ref
        return items

    async def lookup_identifier(self, human_text: str) -> Optional[str]:
        """id известного каталогу ресторана или None (в том числе при ошибке каталога)"""
        try:
            restaurants = await self.get_restaurants()
        except CatalogFetchError as e:
            logger.warning(f"Cannot resolve restaurant '{human_text}': {e}")
            return None
        return find_restaurant_identifier(human_text, restaurants)

    async def resolve_identifier(self, human_text: str) -> str:
        """Найти id ресторана по тексту; если не нашёлся, вернуть текст как есть"""
        return await self.lookup_identifier(human_text) or human_text

    async def _get_json(self, path: str) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}{path}")
        except httpx.TimeoutException:
            logger.error(f"Timeout when fetching {path}")
            raise CatalogFetchError(f"Timeout when fetching {path}")
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {path}: {e}")
            raise CatalogFetchError(f"Error fetching {path}: {e}")

        if response.status_code != 200:
            logger.error(f"Error fetching {path}: {response.status_code}")
            raise CatalogFetchError(f"Catalog returned {response.status_code} for {path}")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {path}: {e}")
            raise CatalogFetchError(f"Invalid JSON from {path}")

    @staticmethod
    def _unwrap(data: Any, field: str) -> List[Dict[str, Any]]:
        # меню приходит либо в конверте {success, menu}, либо голым массивом
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            if data.get("success") is False:
                raise CatalogFetchError(data.get("message") or f"Catalog reported failure for {field}")
            if isinstance(data.get(field), list):
                return data[field]
        raise CatalogFetchError(f"Unexpected catalog response for {field}")

    @staticmethod
    def _parse(raw: List[Dict[str, Any]], model, what: str):
        try:
            return [model.model_validate(entry) for entry in raw]
        except ValidationError as e:
            logger.error(f"Invalid {what} in catalog response: {e}")
            raise CatalogFetchError(f"Invalid {what} in catalog response")
