"""Plain data records passed between stores, services and the API.

Learn: The ORM classes in db/models.py describe the schema; these
dataclasses are what the rest of the code works with. Stores convert
rows to records, so services can be tested against in-memory fakes.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Identity:
    """A registered user."""

    id: int
    email: str
    name: str
    phone: str
    password_hash: str


@dataclass(frozen=True)
class Item:
    """An item listing. `user_id` is the owner and never changes."""

    id: int
    title: str
    price: int
    image: str
    user_id: int
    created_at: datetime
