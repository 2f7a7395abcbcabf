from .cart_service import CartService
from .cart_store import CartStore
from .cart_view import CartView
from .catalog_client import CatalogClient
from .checkout import CheckoutOrchestrator
from .order_client import OrderClient

__all__ = ["CartService", "CartStore", "CartView", "CatalogClient", "CheckoutOrchestrator", "OrderClient"]
