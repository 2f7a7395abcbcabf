from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Identity(BaseModel):
    """Текущий пользователь: парольная сессия, federated-сессия или их смесь"""

    uid: Optional[str] = None  # subject id federated-провайдера
    id: Optional[str] = None  # id пользователя из backend
    alt_id: Optional[str] = Field(None, alias="_id")
    email: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("uid", "id", "alt_id", "email", mode="before")
    @classmethod
    def _stringify(cls, value):
        if value is None:
            return None
        return str(value)
