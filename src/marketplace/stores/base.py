"""Store interfaces — what the services need from persistence.

Learn: Protocols rather than base classes. SqlCredentialStore and
SqlItemStore satisfy them structurally, and so do the in-memory fakes
used by the service tests. Nothing inherits from these.
"""

from typing import Any, Optional, Protocol

from marketplace.records import Identity, Item


class CredentialStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[Identity]: ...

    async def find_by_id(self, user_id: int) -> Optional[Identity]: ...

    async def create(
        self, *, email: str, name: str, phone: str, password_hash: str
    ) -> Identity:
        """Insert a user. Raises ConflictError if the email is taken."""
        ...


class ItemStore(Protocol):
    async def find_by_id(self, item_id: int) -> Optional[Item]: ...

    async def find_all(self) -> list[Item]: ...

    async def create(
        self, *, title: str, price: int, image: str, user_id: int
    ) -> Item: ...

    async def update(self, item_id: int, fields: dict[str, Any]) -> None: ...

    async def delete(self, item_id: int) -> None: ...
