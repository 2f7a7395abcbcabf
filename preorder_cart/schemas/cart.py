from typing import List

from pydantic import BaseModel

from .cart_item import CartEntry


class CartSummary(BaseModel):
    cart_key: str
    total_items: int
    total_amount: float
    items: List[CartEntry]


class CartCount(BaseModel):
    cart_key: str
    total_items: int
