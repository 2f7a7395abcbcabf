from typing import Optional


class CartError(Exception):
    """Базовая ошибка корзины/оформления заказа"""

    status_code = 400


class IdentityMissingError(CartError):
    """Нельзя получить ключ корзины: пользователь не вошёл"""

    status_code = 401

    def __init__(self, message: str = "Please sign in to use the cart"):
        super().__init__(message)


class EmptyCartError(CartError):
    """Оформление заказа с пустой корзиной"""

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class CatalogFetchError(CartError):
    """Каталог недоступен или вернул некорректный ответ"""

    status_code = 502


class OrderSubmissionError(CartError):
    """Не удалось отправить заказ для одного ресторана"""

    status_code = 502

    def __init__(self, restaurant_id: str, reason: Optional[str] = None):
        self.restaurant_id = restaurant_id
        self.reason = reason
        message = f"Failed to place order for restaurant {restaurant_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageParseError(CartError):
    """Сохранённая корзина повреждена (читается как пустая)"""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Corrupt cart data under {key}: {reason}")


class CartItemNotFoundError(CartError):
    """Товара нет в корзине"""

    status_code = 404

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found in cart")
