from .cart import CartCount, CartSummary
from .cart_item import CartEntry, CartItemAdjust, CartItemCreate, CartItemUpdate
from .catalog import MenuItem, Restaurant
from .identity import Identity
from .order import CheckoutResult, OrderDraft, OrderItem, OrderOutcome

__all__ = [
    "CartCount", "CartSummary",
    "CartEntry", "CartItemAdjust", "CartItemCreate", "CartItemUpdate",
    "MenuItem", "Restaurant",
    "Identity",
    "CheckoutResult", "OrderDraft", "OrderItem", "OrderOutcome",
]
