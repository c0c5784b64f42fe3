"""Gallery reconciliation for the Prompt Canvas API.

This module isolates the content-directory scan from
``promptcanvas.api.main`` so route handlers can focus on HTTP concerns while
the file-backed gallery remains testable as a small unit.

The gallery is intentionally simple:

- image files live in the content directory, named ``<id>.<ext>``
- metadata lives next to them in ``<id>_meta.json`` sidecars
- list order is reverse-chronological (newest first)

There is no index: every listing re-scans the directory.  Users may drop
images into the directory by hand or delete them, so the directory itself is
the source of truth.  Images without a sidecar are still listed, using the
file name as their title and the file system timestamp as their creation
time; sidecars without an image are ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from os import stat_result
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from promptcanvas.api.models import GalleryItem
from promptcanvas.core.metadata import read_sidecar, sidecar_path

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


def file_timestamp(stats: stat_result) -> datetime:
    """Return the creation time of a file, or its modification time.

    Birth time is only exposed on some platforms (macOS, BSD, Windows);
    elsewhere the modification time is the closest available value.
    """
    timestamp = getattr(stats, "st_birthtime", None) or stats.st_mtime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def read_image_size(path: Path) -> str:
    """Return ``"<width>x<height>"`` for an image file, or ``"unknown"``."""
    try:
        with Image.open(path) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError):
        return "unknown"
    return f"{width}x{height}"


def build_gallery_item(path: Path, base_url: str = "") -> GalleryItem:
    """Reconcile one image file with its optional metadata sidecar.

    Args:
        path: Image file inside the content directory.
        base_url: Prefix for the image URL.

    Returns:
        The reconciled :class:`GalleryItem`.

    Raises:
        OSError: If the image file cannot be stat'ed.
    """
    stats = path.stat()
    base_id = path.stem
    url = f"{base_url.rstrip('/')}/uploads/{path.name}"
    record = read_sidecar(sidecar_path(path.parent, base_id))

    if record is None:
        return GalleryItem(
            id=base_id,
            filename=path.name,
            url=url,
            title=base_id,
            size=read_image_size(path),
            created_at=file_timestamp(stats),
            file_size=stats.st_size,
        )

    return GalleryItem(
        id=base_id,
        filename=path.name,
        url=url,
        title=record.prompt or base_id,
        prompt=record.prompt,
        revised_prompt=record.revised_prompt or "",
        size=record.size,
        quality=record.quality,
        created_at=record.created_at,
        file_size=stats.st_size,
        has_metadata=True,
    )


def list_gallery_items(uploads_dir: Path, base_url: str = "") -> list[GalleryItem]:
    """Scan the content directory and return the gallery, newest first.

    Files are enumerated in name order, so items with identical timestamps
    keep a stable (name) order after the descending sort.

    Args:
        uploads_dir: Content directory.
        base_url: Prefix for image URLs.

    Returns:
        Reconciled gallery items sorted by ``created_at`` descending.  A
        missing directory yields an empty list.

    Raises:
        OSError: If the directory exists but cannot be listed.
    """
    if not uploads_dir.exists():
        return []

    items: list[GalleryItem] = []

    for path in sorted(uploads_dir.iterdir(), key=lambda p: p.name):
        if path.suffix.lower() not in IMAGE_EXTENSIONS or not path.is_file():
            continue

        try:
            items.append(build_gallery_item(path, base_url))
        except FileNotFoundError:
            # Deleted between the directory listing and the stat call.
            logger.debug(f"Skipping vanished gallery file {path.name}")

    items.sort(key=lambda item: item.created_at, reverse=True)
    return items
