from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.identity import Identity
from ..services.cart_service import CartService
from ..services.catalog_client import CatalogClient
from ..services.order_client import OrderClient


def get_current_identity(
        x_user_uid: Optional[str] = Header(None),
        x_user_id: Optional[str] = Header(None),
        x_user_alt_id: Optional[str] = Header(None),
        x_user_email: Optional[str] = Header(None),
        x_user_name: Optional[str] = Header(None),
) -> Optional[Identity]:
    """
    Пользователь из заголовков, которые выставляет шлюз аутентификации.
    Без заголовков пользователь считается не вошедшим.
    """
    if not any((x_user_uid, x_user_id, x_user_alt_id, x_user_email)):
        return None
    return Identity(
        uid=x_user_uid,
        id=x_user_id,
        alt_id=x_user_alt_id,
        email=x_user_email,
        name=x_user_name,
    )


def get_catalog_client() -> CatalogClient:
    return CatalogClient()


def get_order_client() -> OrderClient:
    return OrderClient()


def get_cart_service(
        db: Session = Depends(get_db),
        order_client: OrderClient = Depends(get_order_client),
) -> CartService:
    return CartService(db, order_client)
