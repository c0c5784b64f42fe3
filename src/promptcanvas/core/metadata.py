"""Metadata sidecar codec.

Every image written to the content directory gets a small JSON file next to
it, named ``<image_id>_meta.json``::

    {
      "prompt": "a red circle",
      "size": "1024x1024",
      "quality": "medium",
      "revisedPrompt": "A bold red circle on a white background",
      "createdAt": "2026-10-19T09:30:12.481000Z"
    }

The gallery reconciler pairs image files with these sidecars by base
identifier.  Sidecars are written once and never modified; a sidecar whose
image was deleted is simply ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from promptcanvas.core.errors import MetadataParseError

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = "_meta.json"


class ImageMetadataRecord(BaseModel):
    """Generation parameters persisted alongside a stored image.

    Attributes:
        prompt: The prompt the user submitted.
        size: Requested dimensions, e.g. ``"1024x1536"``.
        quality: Requested quality level.
        revised_prompt: Provider rewording of the prompt, if any.
        created_at: When the image was saved (timezone-aware, UTC).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    prompt: str
    size: str
    quality: str
    revised_prompt: str | None = Field(default=None, alias="revisedPrompt")
    created_at: datetime = Field(..., alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Sidecars written without an offset are treated as UTC so that they
        # sort against filesystem timestamps.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def encode(record: ImageMetadataRecord) -> bytes:
    """Serialise a record to indented UTF-8 JSON with camelCase keys."""
    return record.model_dump_json(by_alias=True, indent=2).encode("utf-8")


def decode(data: bytes | str) -> ImageMetadataRecord:
    """Parse sidecar content into a record.

    Args:
        data: Raw sidecar bytes (or text).

    Returns:
        The decoded :class:`ImageMetadataRecord`.

    Raises:
        MetadataParseError: If the content is not JSON, not an object, or is
            missing one of ``prompt``, ``size``, ``quality``, ``createdAt``.
    """
    try:
        return ImageMetadataRecord.model_validate_json(data)
    except ValidationError as e:
        raise MetadataParseError(f"Invalid metadata: {e.error_count()} error(s)") from e


def sidecar_path(directory: Path, image_id: str) -> Path:
    """Return the sidecar location for *image_id* inside *directory*."""
    return directory / f"{image_id}{SIDECAR_SUFFIX}"


def read_sidecar(path: Path) -> ImageMetadataRecord | None:
    """Load a sidecar, treating absence and corruption as "no metadata".

    A missing file is the normal case for images that were copied into the
    content directory by hand, so it is not logged.  An unreadable or
    unparsable file is logged as a warning.

    Args:
        path: Path to the ``*_meta.json`` file.

    Returns:
        The decoded record, or ``None``.
    """
    if not path.exists():
        return None

    try:
        return decode(path.read_bytes())
    except (OSError, MetadataParseError) as e:
        logger.warning(f"Could not read metadata {path.name}: {e}")
        return None
