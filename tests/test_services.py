"""Service-layer tests against in-memory stores.

Learn: No database and no HTTP here — AuthService and ItemService get
the fake stores from conftest, a fast bcrypt hasher, and a TokenService
on a frozen clock. This is where the ordering rules (404 before 403,
partial updates, upload checks) are pinned down.
"""

import pytest
import pytest_asyncio

from marketplace.auth.dependencies import CurrentIdentity
from marketplace.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from marketplace.services.auth_service import AuthService
from marketplace.services.item_service import ImageUpload, ItemService

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture()
def auth_svc(credential_store, hasher, tokens):
    return AuthService(credential_store, hasher, tokens)


@pytest.fixture()
def item_svc(item_store, credential_store, images):
    return ItemService(
        items=item_store,
        credentials=credential_store,
        images=images,
        public_base_url="http://shop.local/",
        max_upload_bytes=1024,
    )


@pytest_asyncio.fixture()
async def alice(auth_svc, tokens):
    token = await auth_svc.register("alice@example.com", "Alice", "alice-pass", "555-0100")
    return CurrentIdentity(user_id=tokens.verify(token).user_id)


@pytest_asyncio.fixture()
async def bob(auth_svc, tokens):
    token = await auth_svc.register("bob@example.com", "Bob", "bob-pass-1")
    return CurrentIdentity(user_id=tokens.verify(token).user_id)


# ═══════════════════════════════════════════════════════════
# AuthService
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_then_login(auth_svc, tokens):
    registered = await auth_svc.register("carol@example.com", "Carol", "carol-pass")
    logged_in = await auth_svc.login("carol@example.com", "carol-pass")
    assert tokens.verify(registered).user_id == tokens.verify(logged_in).user_id


@pytest.mark.asyncio
async def test_register_stores_hash_not_plaintext(auth_svc, credential_store, hasher):
    await auth_svc.register("dave@example.com", "Dave", "dave-pass")
    user = await credential_store.find_by_email("dave@example.com")
    assert user.password_hash != "dave-pass"
    assert hasher.verify("dave-pass", user.password_hash)


@pytest.mark.asyncio
async def test_register_duplicate_email(auth_svc):
    await auth_svc.register("erin@example.com", "Erin", "erin-pass")
    with pytest.raises(ConflictError):
        await auth_svc.register("erin@example.com", "Erin Again", "other-pass")


@pytest.mark.asyncio
async def test_email_is_normalized(auth_svc):
    await auth_svc.register("  Frank@Example.COM ", "Frank", "frank-pass")
    with pytest.raises(ConflictError):
        await auth_svc.register("frank@example.com", "Frank", "frank-pass")
    assert await auth_svc.login("FRANK@example.com", "frank-pass")


@pytest.mark.asyncio
async def test_login_wrong_password(auth_svc):
    await auth_svc.register("gina@example.com", "Gina", "gina-pass")
    with pytest.raises(UnauthorizedError) as exc:
        await auth_svc.login("gina@example.com", "not-gina")
    assert exc.value.field == "password"


@pytest.mark.asyncio
async def test_login_unknown_email(auth_svc):
    with pytest.raises(UnauthorizedError) as exc:
        await auth_svc.login("nobody@example.com", "whatever")
    assert exc.value.field == "email"


@pytest.mark.asyncio
async def test_me(auth_svc, alice):
    user = await auth_svc.me(alice.user_id)
    assert user.email == "alice@example.com"
    assert user.phone == "555-0100"


@pytest.mark.asyncio
async def test_me_missing_user(auth_svc):
    with pytest.raises(NotFoundError):
        await auth_svc.me(999)


# ═══════════════════════════════════════════════════════════
# ItemService — create / read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_attributes_item_to_caller(item_svc, alice):
    view = await item_svc.create(alice, title="Desk", price=50)
    assert view.item.user_id == alice.user_id
    assert view.owner.id == alice.user_id
    assert view.item.image == f"http://shop.local/uploads/image-{view.item.id}.jpg"


@pytest.mark.asyncio
async def test_create_for_vanished_user(item_svc):
    with pytest.raises(UnauthorizedError):
        await item_svc.create(CurrentIdentity(user_id=404), title="Desk", price=50)


@pytest.mark.asyncio
async def test_list_items_includes_owners(item_svc, alice, bob):
    await item_svc.create(alice, title="Desk", price=50)
    await item_svc.create(bob, title="Lamp", price=15)
    await item_svc.create(alice, title="Chair", price=20)

    views = await item_svc.list_items()
    assert [v.item.title for v in views] == ["Desk", "Lamp", "Chair"]
    assert [v.owner.name for v in views] == ["Alice", "Bob", "Alice"]


@pytest.mark.asyncio
async def test_item_with_missing_owner_is_internal_error(item_svc, item_store):
    orphan = await item_store.create(title="Desk", price=50, image="", user_id=404)
    with pytest.raises(InternalError):
        await item_svc.get_item(orphan.id)


@pytest.mark.asyncio
async def test_get_missing_item(item_svc):
    with pytest.raises(NotFoundError):
        await item_svc.get_item(123)


# ═══════════════════════════════════════════════════════════
# ItemService — update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_owner_updates_price_only(item_svc, item_store, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    view = await item_svc.update(alice, created.item.id, {"price": 60})
    assert view.item.price == 60
    assert view.item.title == "Desk"
    assert item_store.update_calls[-1] == (created.item.id, {"price": 60})


@pytest.mark.asyncio
async def test_update_applies_both_fields_in_one_call(item_svc, item_store, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    calls_before = len(item_store.update_calls)
    view = await item_svc.update(
        alice, created.item.id, {"title": "Standing desk", "price": 80}
    )
    assert (view.item.title, view.item.price) == ("Standing desk", 80)
    assert len(item_store.update_calls) == calls_before + 1


@pytest.mark.asyncio
async def test_update_ignores_nulls_and_unknown_fields(item_svc, item_store, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    calls_before = len(item_store.update_calls)
    view = await item_svc.update(
        alice, created.item.id, {"title": None, "user_id": 999, "image": "x"}
    )
    assert view.item.user_id == alice.user_id
    assert view.item.title == "Desk"
    assert len(item_store.update_calls) == calls_before


@pytest.mark.asyncio
async def test_non_owner_cannot_update(item_svc, alice, bob):
    created = await item_svc.create(alice, title="Desk", price=50)
    with pytest.raises(ForbiddenError):
        await item_svc.update(bob, created.item.id, {"price": 60})
    assert (await item_svc.get_item(created.item.id)).item.price == 50


@pytest.mark.asyncio
async def test_update_missing_item_is_not_found_before_forbidden(item_svc, bob):
    with pytest.raises(NotFoundError):
        await item_svc.update(bob, 77, {"price": 60})


# ═══════════════════════════════════════════════════════════
# ItemService — delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_owner_deletes_item_and_image(item_svc, images, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    await item_svc.attach_image(alice, created.item.id, ImageUpload("image/png", PNG))
    assert images.path_for(created.item.id).exists()

    await item_svc.delete(alice, created.item.id)

    assert not images.path_for(created.item.id).exists()
    with pytest.raises(NotFoundError):
        await item_svc.get_item(created.item.id)


@pytest.mark.asyncio
async def test_non_owner_cannot_delete(item_svc, alice, bob):
    created = await item_svc.create(alice, title="Desk", price=50)
    with pytest.raises(ForbiddenError):
        await item_svc.delete(bob, created.item.id)
    assert await item_svc.get_item(created.item.id)


@pytest.mark.asyncio
async def test_delete_missing_item(item_svc, alice):
    with pytest.raises(NotFoundError):
        await item_svc.delete(alice, 5)


# ═══════════════════════════════════════════════════════════
# ItemService — image upload
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_attach_image_writes_file(item_svc, images, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    view = await item_svc.attach_image(
        alice, created.item.id, ImageUpload("image/jpeg", b"jpeg-bytes")
    )
    assert view.item.id == created.item.id
    assert images.path_for(created.item.id).read_bytes() == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_attach_image_checks_existence_then_owner_then_file(item_svc, alice, bob):
    with pytest.raises(NotFoundError):
        await item_svc.attach_image(bob, 9, None)

    created = await item_svc.create(alice, title="Desk", price=50)
    with pytest.raises(ForbiddenError):
        await item_svc.attach_image(bob, created.item.id, None)

    with pytest.raises(ValidationError) as exc:
        await item_svc.attach_image(alice, created.item.id, None)
    assert exc.value.field == "image"


@pytest.mark.asyncio
async def test_attach_image_rejects_non_images(item_svc, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    with pytest.raises(ValidationError, match="Please upload an image"):
        await item_svc.attach_image(
            alice, created.item.id, ImageUpload("text/plain", b"hello")
        )


@pytest.mark.asyncio
async def test_attach_image_rejects_oversized(item_svc, images, alice):
    created = await item_svc.create(alice, title="Desk", price=50)
    with pytest.raises(ValidationError, match="too big"):
        await item_svc.attach_image(
            alice, created.item.id, ImageUpload("image/png", b"x" * 1025)
        )
    assert not images.path_for(created.item.id).exists()
