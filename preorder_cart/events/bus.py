import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

CART_UPDATED = "cartUpdated"

Handler = Callable[[], None]


class EventBus:
    """
    Внутрипроцессная шина уведомлений.

    Доставка синхронная, без очереди и без повторной отправки: подписчик,
    зарегистрированный после publish, это событие не получит. Событие не
    несёт данных, подписчик сам перечитывает состояние.
    """

    def __init__(self):
        self.handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event_name: str, handler: Handler) -> Callable[[], None]:
        """Регистрирует обработчик и возвращает функцию отписки"""
        self.handlers.setdefault(event_name, []).append(handler)
        logger.debug(f"Registered handler for event: {event_name}")

        def unsubscribe():
            handlers = self.handlers.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)
                logger.debug(f"Unregistered handler for event: {event_name}")

        return unsubscribe

    def publish(self, event_name: str) -> int:
        """Синхронно вызывает всех подписчиков, возвращает число вызовов"""
        handlers = list(self.handlers.get(event_name, []))
        delivered = 0
        for handler in handlers:
            try:
                handler()
                delivered += 1
            except Exception as e:
                logger.error(f"Error in handler for event {event_name}: {e}")
        return delivered

    def subscriber_count(self, event_name: str) -> int:
        return len(self.handlers.get(event_name, []))


# Глобальный экземпляр шины
event_bus = EventBus()
