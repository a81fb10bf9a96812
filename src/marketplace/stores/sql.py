"""SQLAlchemy-backed stores.

Learn: Each store wraps the request's AsyncSession. Writes commit
immediately — every service operation is a sequence of single-statement
store calls, there is no multi-step unit of work to protect.
"""

from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.models import ItemRow, UserRow
from marketplace.errors import ConflictError
from marketplace.records import Identity, Item


def _identity(row: UserRow) -> Identity:
    return Identity(
        id=row.id,
        email=row.email,
        name=row.name,
        phone=row.phone,
        password_hash=row.password_hash,
    )


def _item(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        title=row.title,
        price=row.price,
        image=row.image,
        user_id=row.user_id,
        created_at=row.created_at,
    )


class SqlCredentialStore:
    """Users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[Identity]:
        result = await self.db.execute(select(UserRow).where(UserRow.email == email))
        row = result.scalars().first()
        return _identity(row) if row else None

    async def find_by_id(self, user_id: int) -> Optional[Identity]:
        row = await self.db.get(UserRow, user_id)
        return _identity(row) if row else None

    async def create(
        self, *, email: str, name: str, phone: str, password_hash: str
    ) -> Identity:
        row = UserRow(email=email, name=name, phone=phone, password_hash=password_hash)
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            await self.db.rollback()
            raise ConflictError("User already exists", field="email")
        await self.db.refresh(row)
        return _identity(row)


class SqlItemStore:
    """Items table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, item_id: int) -> Optional[Item]:
        row = await self.db.get(ItemRow, item_id, populate_existing=True)
        return _item(row) if row else None

    async def find_all(self) -> list[Item]:
        result = await self.db.execute(select(ItemRow).order_by(ItemRow.id))
        return [_item(row) for row in result.scalars().all()]

    async def create(
        self, *, title: str, price: int, image: str, user_id: int
    ) -> Item:
        row = ItemRow(title=title, price=price, image=image, user_id=user_id)
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _item(row)

    async def update(self, item_id: int, fields: dict[str, Any]) -> None:
        await self.db.execute(
            update(ItemRow).where(ItemRow.id == item_id).values(**fields)
        )
        await self.db.commit()

    async def delete(self, item_id: int) -> None:
        await self.db.execute(delete(ItemRow).where(ItemRow.id == item_id))
        await self.db.commit()
