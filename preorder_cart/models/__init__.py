from .cart_storage import CartRecord

__all__ = ["CartRecord"]
