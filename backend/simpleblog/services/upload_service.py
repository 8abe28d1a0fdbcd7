"""
SimpleBlog Backend — Upload Service
=====================================

What:  Persists the optional `featuredImage` upload and returns the relative
       path stored on the post.
How:   Validates extension and size, writes the bytes asynchronously with
       aiofiles, names the file "<epoch millis>-<token>_<original name>".
Who:   Called by PostService on create and update.
When:  Before the store write; the file is fully on disk before the post
       referencing it is persisted.

Storage layout:
    public/                  ← served verbatim at "/"
    └── images/
        ├── 1628920972570-3f9a1c_beach.jpg
        └── 1628920972570-b27e04_beach.jpg

    The post stores "images/1628920972570-3f9a1c_beach.jpg", which is both the
    path under public/ and the URL path the browser requests.

Absent uploads:
    No file part, or a file part with an empty filename (a form submitted
    without choosing a file), yields "" instead of an error.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from simpleblog.config import Settings
from simpleblog.exceptions import UploadError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

# Read uploads in 1MB chunks so the size limit is enforced before the
# whole body is buffered.
CHUNK_SIZE = 1024 * 1024


class UploadService:
    """Stores uploaded images under `<public_root>/<images_dir>`."""

    def __init__(self, settings: Settings):
        self.images_dir = settings.images_dir
        self.images_root = settings.images_root
        self.public_root = Path(settings.public_root).resolve()
        self.max_upload_size = settings.max_upload_size
        self.images_root.mkdir(parents=True, exist_ok=True)
        logger.info("UploadService initialized with images_root=%s", self.images_root)

    @staticmethod
    def has_file(upload: Optional[UploadFile]) -> bool:
        return upload is not None and bool(upload.filename)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension or raises ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="featuredImage",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image is too large. Maximum size is {max_mb:.0f}MB.",
                field="featuredImage",
                context={"max_size": self.max_upload_size, "size": size},
            )

    def generate_filename(self, original_name: str) -> str:
        """
        "<epoch millis>-<token>_<basename>".

        The token is 6 random hex digits; two uploads of the same name in
        the same millisecond get different files.

        Only the final path component of the client-supplied name is kept,
        so names like "../../etc/passwd" cannot escape images_root.
        """
        basename = Path(original_name.replace("\\", "/")).name.strip() or "upload"
        token = uuid.uuid4().hex[:6]
        return f"{int(time.time() * 1000)}-{token}_{basename}"

    async def store_upload(self, upload: Optional[UploadFile]) -> str:
        """
        Persist `upload` and return its path relative to the public root.

        Returns "" when no file was attached.

        Raises:
            ValidationError: unsupported extension or file too large
            UploadError: the file could not be written
        """
        if not self.has_file(upload):
            return ""

        self.validate_extension(upload.filename)
        if upload.size is not None:
            self.validate_size(upload.size)

        filename = self.generate_filename(upload.filename)
        absolute_path = self.images_root / filename
        written = 0

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    self.validate_size(written)
                    await f.write(chunk)
        except ValidationError:
            await self.remove_absolute(absolute_path)
            raise
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", absolute_path, str(e))
            await self.remove_absolute(absolute_path)
            raise UploadError(
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e
        finally:
            await upload.close()

        relative_path = f"{self.images_dir}/{filename}"
        logger.info("Upload stored: %s (%d bytes)", relative_path, written)
        return relative_path

    async def remove(self, relative_path: str) -> None:
        """
        Best-effort removal of a stored upload by its post-relative path.

        Used when the store write fails after the file was written.
        """
        if not relative_path:
            return
        path = (self.public_root / relative_path).resolve()
        if not path.is_relative_to(self.images_root):
            logger.warning("Refusing to remove path outside images root: %s", relative_path)
            return
        await self.remove_absolute(path)

    async def remove_absolute(self, path: Path) -> None:
        try:
            if path.exists():
                path.unlink()
                logger.info("Cleaned up upload: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", path, str(e))
