from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OrderItem(BaseModel):
    item_id: str = Field(alias="itemId")
    quantity: int

    class Config:
        populate_by_name = True


class OrderDraft(BaseModel):
    """Черновик заказа для одного ресторана (не сохраняется)"""

    customer_name: str = Field("", alias="customerName")
    phone: str = ""
    address: str = ""
    restaurant: str
    items: List[OrderItem]
    estimated_time: int = Field(0, alias="estimatedTime")

    class Config:
        populate_by_name = True

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class OrderOutcome(BaseModel):
    restaurant_id: str
    success: bool
    error: Optional[str] = None
    order: Optional[Dict[str, Any]] = None


class CheckoutResult(BaseModel):
    cart_key: str
    outcomes: List[OrderOutcome]
    cleared: bool
    retained_items: int = 0

    @property
    def all_succeeded(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def failed_restaurants(self) -> List[str]:
        return [outcome.restaurant_id for outcome in self.outcomes if not outcome.success]
