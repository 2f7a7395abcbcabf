from .bus import CART_UPDATED, EventBus, event_bus

__all__ = ["CART_UPDATED", "EventBus", "event_bus"]
