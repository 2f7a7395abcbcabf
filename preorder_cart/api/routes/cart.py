from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, Union

from ...schemas.cart import CartCount, CartSummary
from ...schemas.cart_item import CartEntry, CartItemAdjust, CartItemCreate, CartItemUpdate
from ...schemas.identity import Identity
from ...schemas.order import CheckoutResult
from ...services.cart_service import CartService
from ..dependencies import get_cart_service, get_current_identity

router = APIRouter()


@router.get("/cart", response_model=CartSummary)
async def get_cart(
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Получение текущей корзины пользователя"""
    return cart_service.get_cart(identity)


@router.get("/cart/count", response_model=CartCount)
async def get_cart_count(
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Количество товаров для значка корзины"""
    return cart_service.count(identity)


@router.post("/cart/items", response_model=CartEntry)
async def add_item_to_cart(
        item: CartItemCreate,
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Добавление товара в корзину"""
    try:
        return await cart_service.add_item(identity, item)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/cart/items/{item_id}", response_model=Union[CartEntry, dict])
async def update_cart_item(
        item_id: str,
        item: CartItemUpdate,
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Обновление количества товара в корзине (404, если товара в ней нет)"""
    result = await cart_service.update_item(identity, item_id, item)

    if result is None:
        return {"message": "Item removed from cart (quantity was 0 or less)"}
    return result


@router.patch("/cart/items/{item_id}", response_model=Union[CartEntry, dict])
async def adjust_cart_item(
        item_id: str,
        item: CartItemAdjust,
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Увеличение/уменьшение количества (+/-)"""
    result = await cart_service.adjust_item(identity, item_id, item)

    if result is None:
        return {"message": "Item removed from cart (quantity was 0 or less)"}
    return result


@router.delete("/cart/items/{item_id}")
async def remove_item_from_cart(
        item_id: str,
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Удаление товара из корзины"""
    success = await cart_service.remove_item(identity, item_id)

    if success:
        return {"message": "Item removed from cart"}
    else:
        raise HTTPException(status_code=404, detail="Item not found in cart")


@router.delete("/cart")
async def clear_cart(
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Очистка корзины"""
    items_count = await cart_service.clear_cart(identity)

    if items_count:
        return {"message": "Cart cleared successfully", "items_removed": items_count}
    else:
        return {"message": "Cart was already empty", "items_removed": 0}


@router.post("/cart/checkout", response_model=CheckoutResult)
async def checkout_cart(
        identity: Optional[Identity] = Depends(get_current_identity),
        cart_service: CartService = Depends(get_cart_service)
):
    """Оформление заказа"""
    return await cart_service.checkout(identity)
