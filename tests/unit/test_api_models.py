"""Tests for the Pydantic request/response models.

Tests cover:
- Defaults of the generation request.
- camelCase serialisation of response models.
- Alias and field-name population of the history payload.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from promptcanvas.api.models import GalleryItem, SaveHistoryRequest
from promptcanvas.core.models import GeneratedImage, GenerationRequest, GenerationResult


class TestGenerationRequest:
    """Test GenerationRequest Pydantic model."""

    def test_defaults(self):
        req = GenerationRequest(prompt="a red circle")
        assert req.size == "1024x1024"
        assert req.quality == "medium"
        assert req.n == 1

    def test_prompt_may_be_omitted(self):
        """Prompt presence is checked by the orchestrator, not the model."""
        assert GenerationRequest().prompt is None

    def test_non_integer_count_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="p", n="many")

    def test_boolean_count_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest.model_validate_json('{"prompt": "p", "n": true}')

    def test_settings_echo(self):
        req = GenerationRequest(prompt="p", size="1536x1024", quality="auto", n=4)
        assert req.settings() == {"size": "1536x1024", "quality": "auto", "n": 4}


class TestResponseModels:
    """Test camelCase serialisation."""

    def test_generated_image_aliases(self):
        image = GeneratedImage(
            id="img_1_0",
            url="/uploads/img_1_0.png",
            revised_prompt="r",
            storage="file",
            filename="img_1_0.png",
        )
        data = image.model_dump(by_alias=True)
        assert data["revisedPrompt"] == "r"
        assert "revised_prompt" not in data

    def test_generated_image_storage_is_restricted(self):
        with pytest.raises(ValidationError):
            GeneratedImage(id="x", url="u", storage="cloud")

    def test_generation_result_aliases(self):
        result = GenerationResult(
            images=[],
            original_prompt="p",
            source="Fake",
            settings={"n": 1},
        )
        data = result.model_dump(by_alias=True, exclude_none=True)
        assert data == {
            "success": True,
            "images": [],
            "originalPrompt": "p",
            "source": "Fake",
            "settings": {"n": 1},
        }

    def test_gallery_item_aliases(self):
        item = GalleryItem(
            id="img",
            filename="img.png",
            url="/uploads/img.png",
            title="img",
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            file_size=10,
        )
        data = item.model_dump(by_alias=True, mode="json")
        assert data["createdAt"] == "2026-01-01T00:00:00Z"
        assert data["fileSize"] == 10
        assert data["hasMetadata"] is False


class TestSaveHistoryRequest:
    """Test SaveHistoryRequest Pydantic model."""

    def test_accepts_camel_case(self):
        req = SaveHistoryRequest.model_validate(
            {"prompt": "p", "imageUrl": "/uploads/a.png", "settings": {"n": 1}, "duration": 3}
        )
        assert req.image_url == "/uploads/a.png"
        assert req.duration == 3.0

    def test_accepts_field_names(self):
        assert SaveHistoryRequest(image_url="u").image_url == "u"

    def test_all_fields_optional(self):
        req = SaveHistoryRequest()
        assert req.prompt is None
        assert req.settings is None
