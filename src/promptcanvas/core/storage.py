"""Image persistence for the content directory.

:class:`ImageStore` turns provider items into :class:`GeneratedImage`
records:

- a :class:`~promptcanvas.core.provider.RemoteImage` is passed through
  untouched (nothing is written);
- an :class:`~promptcanvas.core.provider.InlineImage` is written to
  ``<image_id>.<ext>`` together with a ``<image_id>_meta.json`` sidecar.

If the write fails the request still succeeds: the image is returned as a
``data:`` URI and its ``storage`` field is ``"inline"`` so the client can
tell that it was not persisted.

Identifiers combine a request stamp from :func:`new_request_stamp` with the
item index.  The stamp is a millisecond clock that never repeats within the
process, so concurrent requests cannot produce the same file name.
"""

from __future__ import annotations

import base64
import contextlib
import io
import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from promptcanvas.core import metadata
from promptcanvas.core.errors import PersistenceError
from promptcanvas.core.models import GeneratedImage, GenerationRequest
from promptcanvas.core.provider import InlineImage, ProviderImageItem, RemoteImage

logger = logging.getLogger(__name__)

# Pillow format name -> (file extension, MIME subtype)
_FORMATS: dict[str, tuple[str, str]] = {
    "PNG": ("png", "png"),
    "JPEG": ("jpg", "jpeg"),
    "WEBP": ("webp", "webp"),
    "GIF": ("gif", "gif"),
}
_DEFAULT_FORMAT = "PNG"

_stamp_lock = threading.Lock()
_last_stamp = 0


def new_request_stamp() -> int:
    """Return a strictly increasing millisecond timestamp.

    Two calls within the same millisecond get consecutive values, so the
    result is unique for the lifetime of the process.
    """
    global _last_stamp
    with _stamp_lock:
        stamp = max(time.time_ns() // 1_000_000, _last_stamp + 1)
        _last_stamp = stamp
        return stamp


def detect_format(data: bytes) -> str:
    """Return the Pillow format name of *data*, defaulting to ``"PNG"``."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            fmt = image.format
    except (UnidentifiedImageError, OSError):
        return _DEFAULT_FORMAT
    return fmt if fmt in _FORMATS else _DEFAULT_FORMAT


class ImageStore:
    """Writes generated images and their metadata sidecars.

    Args:
        uploads_dir: Content directory (created if missing).
        base_url: Prefix for local image URLs; ``""`` yields relative
            ``/uploads/<file>`` URLs.
    """

    def __init__(self, uploads_dir: Path, base_url: str = ""):
        self.uploads_dir = Path(uploads_dir)
        self.base_url = base_url.rstrip("/")
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

    def url_for(self, filename: str) -> str:
        return f"{self.base_url}/uploads/{filename}"

    def save(
        self,
        item: ProviderImageItem,
        request: GenerationRequest,
        image_id: str,
    ) -> GeneratedImage:
        """Persist one provider item and describe where it ended up.

        Args:
            item: Provider response item.
            request: The validated generation request.
            image_id: Identifier to use for the stored files.

        Returns:
            The :class:`GeneratedImage` record for the item.
        """
        revised_prompt = item.revised_prompt or request.prompt

        if isinstance(item, RemoteImage):
            return GeneratedImage(
                id=image_id,
                url=item.url,
                revised_prompt=revised_prompt,
                storage="remote",
            )

        if isinstance(item, InlineImage):
            fmt = detect_format(item.data)
            try:
                filename = self._write(item.data, fmt, request, image_id, revised_prompt)
            except PersistenceError as e:
                logger.error(f"Failed to save image {image_id}, returning inline data: {e}")
                subtype = _FORMATS[fmt][1]
                encoded = base64.b64encode(item.data).decode("ascii")
                return GeneratedImage(
                    id=image_id,
                    url=f"data:image/{subtype};base64,{encoded}",
                    revised_prompt=revised_prompt,
                    storage="inline",
                )

            return GeneratedImage(
                id=image_id,
                url=self.url_for(filename),
                revised_prompt=revised_prompt,
                storage="file",
                filename=filename,
            )

        raise TypeError(f"Unsupported provider item: {type(item).__name__}")

    def _write(
        self,
        data: bytes,
        fmt: str,
        request: GenerationRequest,
        image_id: str,
        revised_prompt: str | None,
    ) -> str:
        """Write the image and its sidecar, returning the image file name.

        Raises:
            PersistenceError: If either file cannot be written.  A partially
                written image is removed so the gallery never lists it.
        """
        filename = f"{image_id}.{_FORMATS[fmt][0]}"
        image_path = self.uploads_dir / filename

        record = metadata.ImageMetadataRecord(
            prompt=request.prompt or "",
            size=request.size,
            quality=request.quality,
            revised_prompt=revised_prompt,
            created_at=datetime.now(timezone.utc),
        )

        try:
            image_path.write_bytes(data)
            metadata.sidecar_path(self.uploads_dir, image_id).write_bytes(metadata.encode(record))
        except OSError as e:
            with contextlib.suppress(OSError):
                image_path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {filename}: {e}") from e

        logger.info(f"Image saved as {filename} with metadata")
        return filename
