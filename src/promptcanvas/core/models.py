"""Domain models shared by the core components and the API layer.

Field names are snake_case in Python and camelCase on the wire; every model
accepts either form on input (``populate_by_name``) and the API serialises
with ``by_alias=True``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SUPPORTED_SIZES: tuple[str, ...] = ("1024x1024", "1024x1536", "1536x1024")
SUPPORTED_QUALITIES: tuple[str, ...] = ("medium", "auto")
MIN_IMAGES = 1
MAX_IMAGES = 10


class GenerationRequest(BaseModel):
    """Request body for ``POST /api/generate-image``.

    Only types are checked here; the domain checks (empty prompt, supported
    size and quality, image count) are done by the orchestrator so that the
    client receives a message naming the violated field.
    """

    prompt: str | None = Field(default=None, description="Text prompt.")
    size: str = Field(default="1024x1024", description="One of SUPPORTED_SIZES.")
    quality: str = Field(default="medium", description="One of SUPPORTED_QUALITIES.")
    n: int = Field(default=1, strict=True, description="Number of images (1-10).")

    def settings(self) -> dict[str, Any]:
        """Return the settings echoed back in generation responses."""
        return {"size": self.size, "quality": self.quality, "n": self.n}


class GeneratedImage(BaseModel):
    """One image produced by a generation request.

    Attributes:
        id: ``<prefix>_<request stamp>_<index>``, unique per request.
        url: Remote URL, local ``/uploads/...`` URL, or ``data:`` URI.
        revised_prompt: Provider rewording (falls back to the prompt).
        storage: ``"remote"`` (nothing stored), ``"file"`` (written to the
            content directory), or ``"inline"`` (persistence failed; the
            image travels as a data URI).
        filename: Stored file name when ``storage == "file"``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    url: str
    revised_prompt: str | None = None
    storage: Literal["remote", "file", "inline"]
    filename: str | None = None


class GenerationResult(BaseModel):
    """Response body of a generation request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    images: list[GeneratedImage]
    original_prompt: str
    source: str
    settings: dict[str, Any]
    warning: str | None = None


class HistoryEntry(BaseModel):
    """A past generation remembered by the history ledger."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    prompt: str | None = None
    image_url: str | None = None
    settings: dict[str, Any] | None = None
    duration: float | None = None
    created_at: datetime
