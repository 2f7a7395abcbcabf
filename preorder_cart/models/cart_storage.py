from sqlalchemy import Column, DateTime, String, Text, func

from ..database import Base


class CartRecord(Base):
    __tablename__ = "cart_storage"

    key = Column(String, primary_key=True, index=True)  # cart_<ключ пользователя>
    value = Column(Text, nullable=False, default="[]")  # JSON-массив позиций корзины
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
