"""Item API routes.

Learn: Reads (list, get) are open to anyone. Create, update, delete and
image upload take get_current_user per route, and the service runs the
ownership check after loading the item — so the status order is always
401 (no/bad token) → 404 (no such item) → 403 (not yours).
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.auth.dependencies import CurrentIdentity, get_current_user
from marketplace.db.engine import get_db
from marketplace.schemas.item import ItemCreate, ItemList, ItemRead, ItemUpdate
from marketplace.services.item_service import ImageUpload, ItemService
from marketplace.stores.sql import SqlCredentialStore, SqlItemStore

router = APIRouter(prefix="/items")


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> ItemService:
    ctx = request.app.state.ctx
    return ItemService(
        items=SqlItemStore(db),
        credentials=SqlCredentialStore(db),
        images=ctx.images,
        public_base_url=ctx.settings.public_base_url,
        max_upload_bytes=ctx.settings.max_upload_bytes,
    )


@router.post("", response_model=ItemRead, status_code=201)
async def create_item(
    body: ItemCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ItemService = Depends(_svc),
):
    view = await svc.create(identity, title=body.title, price=body.price)
    return ItemRead.from_view(view)


@router.get("", response_model=ItemList)
async def list_items(svc: ItemService = Depends(_svc)):
    views = await svc.list_items()
    return ItemList(items=[ItemRead.from_view(v) for v in views])


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(item_id: int, svc: ItemService = Depends(_svc)):
    return ItemRead.from_view(await svc.get_item(item_id))


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: int,
    body: ItemUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ItemService = Depends(_svc),
):
    """Partial update — only the fields present in the body change."""
    view = await svc.update(identity, item_id, body.model_dump(exclude_unset=True))
    return ItemRead.from_view(view)


@router.delete("/{item_id}")
async def delete_item(
    item_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ItemService = Depends(_svc),
):
    await svc.delete(identity, item_id)
    return {"deleted": True}


@router.post("/{item_id}/images", response_model=ItemRead)
async def upload_image(
    item_id: int,
    file: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ItemService = Depends(_svc),
):
    """Upload the item's image (multipart field "file", jpeg/png, ≤ 1 MiB)."""
    upload = None
    if file is not None:
        # One byte past the limit is enough to know it is too big
        data = await file.read(svc.max_upload_bytes + 1)
        upload = ImageUpload(content_type=file.content_type, data=data)
    view = await svc.attach_image(identity, item_id, upload)
    return ItemRead.from_view(view)
