"""Pydantic request and response models for the Prompt Canvas API.

The generation request itself lives in :mod:`promptcanvas.core.models`
because the orchestrator consumes it directly.  This module holds the
payloads that only exist at the HTTP boundary.

Models
------
SaveHistoryRequest
    Payload for ``POST /api/save-to-history``.
GalleryItem
    One entry of the ``GET /api/uploads`` listing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from promptcanvas.core.models import GenerationRequest

__all__ = ["GalleryItem", "GenerationRequest", "SaveHistoryRequest"]


class SaveHistoryRequest(BaseModel):
    """Request body for the ``POST /api/save-to-history`` endpoint.

    Attributes:
        prompt: Prompt of the generation being recorded.
        image_url: URL of the image the user chose to keep.
        settings: Free-form settings snapshot (size, quality, n, ...).
        duration: Optional generation time in seconds.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str | None = Field(default=None, description="Generation prompt.")
    image_url: str | None = Field(default=None, description="Image URL to remember.")
    settings: dict[str, Any] | None = Field(default=None, description="Settings snapshot.")
    duration: float | None = Field(default=None, description="Generation time in seconds.")


class GalleryItem(BaseModel):
    """A stored image merged with its optional metadata sidecar.

    Attributes:
        id: Base identifier (file name without extension).
        filename: File name inside the content directory.
        url: URL the image is served from.
        title: Prompt when metadata exists, otherwise the base identifier.
        prompt: Original prompt, ``""`` without metadata.
        revised_prompt: Provider rewording, ``""`` without metadata.
        size: Requested size, or the pixel size read from the file.
        quality: Requested quality, ``"unknown"`` without metadata.
        created_at: Recorded creation time, or the file's own timestamp.
        file_size: Size of the image file in bytes.
        has_metadata: Whether a valid sidecar was found.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    filename: str
    url: str
    title: str
    prompt: str = ""
    revised_prompt: str = ""
    size: str = "unknown"
    quality: str = "unknown"
    created_at: datetime
    file_size: int
    has_metadata: bool = False
