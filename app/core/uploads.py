"""
Field Reports API — Attachment storage on local disk

Images land in ``<UPLOAD_DIR>/images`` and videos in ``<UPLOAD_DIR>/videos``.
Reports store the public relative path (``uploads/images/<name>``) that the
``/uploads`` static mount serves.
"""
import logging
import secrets
import time
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "uploads"
CHUNK_SIZE = 1024 * 1024
SUBDIRS = ("images", "videos")


def ensure_upload_dirs(upload_dir: str | Path) -> Path:
    root = Path(upload_dir)
    for sub in SUBDIRS:
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def _subdir_for(content_type: str | None) -> str:
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return "images"
    if content_type.startswith("video/"):
        return "videos"
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file type")


def stored_name(original: str | None) -> str:
    """``<epoch-ms>-<8 hex><ext>``; the extension comes from the client filename."""
    suffix = Path(original or "").suffix.lower()[:16]
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"


class AttachmentWriter:
    """Writes the attachments of one request; ``discard`` removes them again."""

    def __init__(self, upload_dir: str | Path, max_bytes: int):
        self.root = Path(upload_dir)
        self.max_bytes = max_bytes
        self.written: list[Path] = []

    def check_types(self, uploads: list[UploadFile]) -> None:
        for upload in uploads:
            _subdir_for(upload.content_type)

    async def save(self, upload: UploadFile) -> str:
        subdir = _subdir_for(upload.content_type)
        name = stored_name(upload.filename)
        target = self.root / subdir / name
        self.written.append(target)

        size = 0
        with target.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > self.max_bytes:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"File too large: {upload.filename}",
                    )
                out.write(chunk)

        return f"{PUBLIC_PREFIX}/{subdir}/{name}"

    async def save_all(self, uploads: list[UploadFile]) -> list[str]:
        return [await self.save(upload) for upload in uploads]

    def discard(self) -> None:
        for path in self.written:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove attachment %s", path)
        self.written.clear()
