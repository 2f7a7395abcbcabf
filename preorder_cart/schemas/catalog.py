from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class Restaurant(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    cuisine: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = []
    rating: Optional[float] = None

    class Config:
        extra = "allow"


class MenuItem(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    price: float = 0
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    is_available: bool = Field(True, validation_alias=AliasChoices("isAvailable", "is_available"))
    restaurant: Optional[str] = None

    class Config:
        extra = "allow"
