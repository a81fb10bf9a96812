"""Pydantic schemas for item listings.

Learn: Separate "Create"/"Update" schemas (input) from "Read" schemas
(output). ItemUpdate fields are all optional; the router passes only
the fields the client actually set (exclude_unset) to the service,
which applies them as one partial update.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from marketplace.schemas.auth import UserRead
from marketplace.services.item_service import ItemView

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 255

# Prices live in a 32-bit INTEGER column
MIN_PRICE = -(2**31)
MAX_PRICE = 2**31 - 1


def _clean_title(value: str, message: str) -> str:
    value = value.strip()
    if len(value) < MIN_TITLE_LENGTH:
        raise PydanticCustomError("title", message)
    return value


class ItemCreate(BaseModel):
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    price: int = Field(ge=MIN_PRICE, le=MAX_PRICE)

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        return _clean_title(value, "Title is required")


class ItemUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=MAX_TITLE_LENGTH)
    price: Optional[int] = Field(None, ge=MIN_PRICE, le=MAX_PRICE)

    @field_validator("title")
    @classmethod
    def title_long_enough(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _clean_title(value, "Title should contain at least 3 characters")


class ItemRead(BaseModel):
    id: int
    created_at: datetime
    title: str
    price: int
    image: str
    user_id: int
    user: UserRead

    @classmethod
    def from_view(cls, view: ItemView) -> "ItemRead":
        item = view.item
        return cls(
            id=item.id,
            created_at=item.created_at,
            title=item.title,
            price=item.price,
            image=item.image,
            user_id=item.user_id,
            user=UserRead.model_validate(view.owner),
        )


class ItemList(BaseModel):
    items: list[ItemRead]
