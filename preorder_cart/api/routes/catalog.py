import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...exceptions import CatalogFetchError
from ...services.catalog_client import CatalogClient
from ..dependencies import get_catalog_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/restaurants")
async def list_restaurants(catalog: CatalogClient = Depends(get_catalog_client)):
    """Список ресторанов; при ошибке каталога пустой список и текст ошибки"""
    try:
        restaurants = await catalog.get_restaurants()
    except CatalogFetchError as e:
        return JSONResponse(
            status_code=502,
            content={"success": False, "restaurants": [], "error": str(e)}
        )
    return {"success": True, "restaurants": [r.model_dump() for r in restaurants]}


@router.get("/restaurants/resolve")
async def resolve_restaurant(
        name: str = Query(..., min_length=1, description="id, slug или название ресторана"),
        catalog: CatalogClient = Depends(get_catalog_client)
):
    """Определение id ресторана по названию (best-effort)"""
    return {"query": name, "restaurant_id": await catalog.resolve_identifier(name)}


@router.get("/menu/{restaurant}")
async def get_menu(restaurant: str, catalog: CatalogClient = Depends(get_catalog_client)):
    """Меню ресторана по id, slug или названию"""
    matched_id = await catalog.lookup_identifier(restaurant)
    restaurant_id = matched_id or restaurant
    try:
        # найденный в каталоге id не переводится в slug повторно
        menu = await catalog.get_menu(restaurant_id, exact=matched_id is not None)
    except CatalogFetchError as e:
        return JSONResponse(
            status_code=502,
            content={"success": False, "restaurant_id": restaurant_id, "menu": [], "error": str(e)}
        )
    return {"success": True, "restaurant_id": restaurant_id, "menu": [item.model_dump() for item in menu]}
