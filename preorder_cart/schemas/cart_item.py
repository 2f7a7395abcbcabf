from typing import Optional

from pydantic import BaseModel, Field

from .catalog import MenuItem


class CartEntry(BaseModel):
    """Позиция корзины: копия данных меню на момент добавления"""

    id: str
    name: str = ""
    price: float = 0
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None
    description: Optional[str] = None
    restaurant: str

    class Config:
        extra = "allow"


class CartItemCreate(BaseModel):
    item: MenuItem
    quantity: int = Field(1, ge=1)
    # ресторан, из меню которого добавляют (если в самом блюде не указан)
    restaurant: Optional[str] = None


class CartItemUpdate(BaseModel):
    quantity: int


class CartItemAdjust(BaseModel):
    change: int
