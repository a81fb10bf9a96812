"""Item image storage on local disk.

Learn: Images live in one flat directory as image-{item_id}.jpg and
are served back by the StaticFiles mount at /uploads. The file name is
fixed per item, so re-uploading replaces the previous image and the
URL stored on the item never changes.
"""

from pathlib import Path

from starlette.concurrency import run_in_threadpool

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})


def image_filename(item_id: int) -> str:
    return f"image-{item_id}.jpg"


class ImageStorage:
    """Writes and removes item images under a root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, item_id: int) -> Path:
        return self.root / image_filename(item_id)

    async def save(self, item_id: int, data: bytes) -> Path:
        path = self.path_for(item_id)

        def _write() -> None:
            self.ensure_root()
            path.write_bytes(data)

        await run_in_threadpool(_write)
        return path

    async def delete(self, item_id: int) -> None:
        await run_in_threadpool(self.path_for(item_id).unlink, missing_ok=True)
