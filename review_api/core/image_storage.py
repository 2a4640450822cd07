"""
Disk storage for review image uploads.
"""

import io
import logging
import re
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile
from PIL import Image as PILImage

from review_api.core.errors import UploadTooLargeError, ValidationError


logger = logging.getLogger(__name__)


def item_segment(item_id: str) -> str:
    """Filesystem-safe directory name for an item id."""
    segment = re.sub(r'[^\w.-]', '_', item_id).strip('.')
    return segment or "_"


class ImageStorage:
    """
    Validate and store uploaded images under a per-item directory.

    Files live at <root>/<item segment>/<uuid><ext> and are served back
    under <url_prefix>/<item segment>/<uuid><ext>.
    """

    def __init__(self, root: Path, url_prefix: str = "/uploads", max_size: int = 5 * 1024 * 1024, max_files: int = 5):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size
        self.max_files = max_files

    def _check_image(self, filename: str, content_type: Optional[str], content: bytes) -> None:
        """
        Raises:
            UploadTooLargeError: If the file exceeds max_size
            ValidationError: If the file is not a readable image
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed")

        if len(content) > self.max_size:
            raise UploadTooLargeError(
                f"File {filename} too large. Maximum size: {self.max_size / (1024*1024):.0f}MB"
            )

        if not content:
            raise ValidationError(f"Empty file: {filename}")

        try:
            PILImage.open(io.BytesIO(content)).verify()
        except Exception as e:
            raise ValidationError(f"Invalid image file: {filename}") from e

    async def save(self, item_id: str, files: Sequence[UploadFile]) -> List[str]:
        """
        Validate and store uploaded files for an item.

        All files are checked before any is written.

        Args:
            item_id: Item the images belong to
            files: Uploaded files (may be empty)

        Returns:
            Public URLs in upload order

        Raises:
            ValidationError: Too many files, non-image or unreadable file
            UploadTooLargeError: File larger than max_size
        """
        if len(files) > self.max_files:
            raise ValidationError(f"Too many files. Maximum {self.max_files} images per review")

        checked = []
        for upload in files:
            filename = upload.filename or "image"
            content = await upload.read()
            self._check_image(filename, upload.content_type, content)
            checked.append((filename, content))

        segment = item_segment(item_id)
        item_dir = self.root / segment
        item_dir.mkdir(parents=True, exist_ok=True)

        urls = []
        for filename, content in checked:
            stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
            (item_dir / stored_name).write_bytes(content)
            urls.append(f"{self.url_prefix}/{segment}/{stored_name}")

        return urls

    def path_for(self, url: str) -> Optional[Path]:
        """Local path behind a URL issued by this storage, else None."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None

        path = (self.root / url[len(prefix):]).resolve()
        if self.root.resolve() not in path.parents:
            return None
        return path

    def delete(self, urls: Iterable[str]) -> None:
        """Remove stored files. Unknown URLs are skipped, failures logged."""
        for url in urls:
            path = self.path_for(url)
            if path is None:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to delete image {url}: {str(e)}")
