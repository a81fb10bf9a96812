"""Item service — listings and their owner-only mutations.

Learn: Every mutation follows the same order:
1. Load the item fresh from the store → NotFoundError if missing
2. authorize_owner(identity, item) → ForbiddenError if not the owner
3. Apply the change with a single store call

Steps 1–3 are separate store calls, not one transaction. A concurrent
delete between 1 and 3 turns the write into a no-op on a missing row;
that window is accepted rather than papered over.

Reads are public and return each item together with its owner's
public profile.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from marketplace.auth.dependencies import CurrentIdentity
from marketplace.auth.ownership import authorize_owner
from marketplace.errors import (
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from marketplace.records import Identity, Item
from marketplace.storage import ALLOWED_CONTENT_TYPES, ImageStorage, image_filename
from marketplace.stores.base import CredentialStore, ItemStore

logger = structlog.get_logger()

# Fields an owner may change after creation; ownership never moves.
UPDATABLE_FIELDS = ("title", "price")


@dataclass(frozen=True)
class ItemView:
    """An item plus its owner's record, ready to render."""

    item: Item
    owner: Identity


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file, already read into memory."""

    content_type: Optional[str]
    data: bytes


class ItemService:
    """Business logic for item listings."""

    def __init__(
        self,
        items: ItemStore,
        credentials: CredentialStore,
        images: ImageStorage,
        public_base_url: str,
        max_upload_bytes: int = 1024 * 1024,
    ):
        self.items = items
        self.credentials = credentials
        self.images = images
        self.public_base_url = public_base_url.rstrip("/")
        self.max_upload_bytes = max_upload_bytes

    def image_url(self, item_id: int) -> str:
        return f"{self.public_base_url}/uploads/{image_filename(item_id)}"

    # ─── Reads ──────────────────────────────────────────

    async def list_items(self) -> list[ItemView]:
        owners: dict[int, Identity] = {}
        views = []
        for item in await self.items.find_all():
            if item.user_id not in owners:
                owners[item.user_id] = await self._owner_of(item)
            views.append(ItemView(item=item, owner=owners[item.user_id]))
        return views

    async def get_item(self, item_id: int) -> ItemView:
        item = await self._load(item_id)
        return ItemView(item=item, owner=await self._owner_of(item))

    # ─── Mutations ──────────────────────────────────────

    async def create(self, identity: CurrentIdentity, title: str, price: int) -> ItemView:
        owner = await self.credentials.find_by_id(identity.user_id)
        if not owner:
            raise UnauthorizedError("User no longer exists")

        item = await self.items.create(
            title=title, price=price, image="", user_id=owner.id
        )
        await self.items.update(item.id, {"image": self.image_url(item.id)})
        item = await self._load(item.id)

        logger.info("items.created", item_id=item.id, user_id=owner.id)
        return ItemView(item=item, owner=owner)

    async def update(
        self, identity: CurrentIdentity, item_id: int, changes: dict[str, Any]
    ) -> ItemView:
        """Apply only the provided (non-null) updatable fields."""
        item = await self._load(item_id)
        authorize_owner(identity, item)

        fields = {
            key: value
            for key, value in changes.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        if fields:
            await self.items.update(item.id, fields)
            item = await self._load(item.id)
            logger.info("items.updated", item_id=item.id, fields=sorted(fields))

        return ItemView(item=item, owner=await self._owner_of(item))

    async def delete(self, identity: CurrentIdentity, item_id: int) -> None:
        item = await self._load(item_id)
        authorize_owner(identity, item)

        await self.items.delete(item.id)
        await self.images.delete(item.id)
        logger.info("items.deleted", item_id=item.id)

    async def attach_image(
        self, identity: CurrentIdentity, item_id: int, upload: Optional[ImageUpload]
    ) -> ItemView:
        item = await self._load(item_id)
        authorize_owner(identity, item)

        if upload is None or upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Please upload an image", field="image")
        if len(upload.data) > self.max_upload_bytes:
            raise ValidationError("The file is too big", field="image")

        await self.images.save(item.id, upload.data)
        logger.info("items.image_uploaded", item_id=item.id, size=len(upload.data))
        return ItemView(item=item, owner=await self._owner_of(item))

    # ─── Helpers ────────────────────────────────────────

    async def _load(self, item_id: int) -> Item:
        item = await self.items.find_by_id(item_id)
        if not item:
            raise NotFoundError("Item not found")
        return item

    async def _owner_of(self, item: Item) -> Identity:
        owner = await self.credentials.find_by_id(item.user_id)
        if not owner:
            # user_id is a foreign key; a dangling owner is a broken store
            raise InternalError(f"Owner {item.user_id} of item {item.id} is missing")
        return owner
