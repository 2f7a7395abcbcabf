from typing import Optional

from ..exceptions import IdentityMissingError
from ..schemas.identity import Identity

CART_KEY_PREFIX = "cart_"

# Порядок важен: federated id > backend id > альтернативный id > email
KEY_PRECEDENCE = ("uid", "id", "alt_id", "email")


def resolve_cart_key(identity: Optional[Identity]) -> Optional[str]:
    """Единственное место, где из пользователя получается ключ корзины"""
    if identity is None:
        return None
    for field in KEY_PRECEDENCE:
        value = getattr(identity, field, None)
        if value is not None and str(value).strip():
            return str(value)
    return None


def require_cart_key(identity: Optional[Identity]) -> str:
    key = resolve_cart_key(identity)
    if key is None:
        raise IdentityMissingError()
    return key


def storage_key(cart_key: str) -> str:
    return f"{CART_KEY_PREFIX}{cart_key}"


def display_name(identity: Optional[Identity]) -> str:
    if identity is None:
        return ""
    return identity.name or identity.display_name or ""
