"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from promptcanvas.core.config import PromptCanvasConfig


class TestPromptCanvasConfig:
    """Tests for PromptCanvasConfig."""

    def test_default_values(self, temp_dir):
        """Test that default configuration values are set correctly."""
        config = PromptCanvasConfig(_env_file=None, uploads_dir=str(temp_dir / "uploads"))

        assert config.api_key is None
        assert config.azure_endpoint is None
        assert config.image_model == "gpt-image-1"
        assert config.provider_timeout == 120.0
        assert config.placeholder_fallback is True
        assert config.history_capacity == 50
        assert config.public_base_url == ""
        assert config.server_port == 3001
        assert config.cors_allow_origins == ["*"]

    def test_uploads_dir_is_created(self, temp_dir):
        """The content directory should be created on initialisation."""
        uploads = temp_dir / "nested" / "uploads"
        PromptCanvasConfig(_env_file=None, uploads_dir=str(uploads))
        assert uploads.is_dir()

    def test_environment_variables_override_defaults(self, temp_dir, monkeypatch):
        """PROMPTCANVAS_* environment variables should be picked up."""
        monkeypatch.setenv("PROMPTCANVAS_API_KEY", "from-env")
        monkeypatch.setenv("PROMPTCANVAS_PLACEHOLDER_FALLBACK", "false")
        monkeypatch.setenv("PROMPTCANVAS_PROVIDER_TIMEOUT", "30")
        monkeypatch.setenv("PROMPTCANVAS_UPLOADS_DIR", str(temp_dir / "env-uploads"))

        config = PromptCanvasConfig(_env_file=None)

        assert config.api_key == "from-env"
        assert config.placeholder_fallback is False
        assert config.provider_timeout == 30.0
        assert config.uploads_dir == temp_dir / "env-uploads"

    def test_env_file_is_read(self, temp_dir):
        """Values from a .env file should be loaded."""
        env_file = temp_dir / ".env"
        env_file.write_text(
            f"PROMPTCANVAS_AZURE_ENDPOINT=https://example.openai.azure.com/\n"
            f"PROMPTCANVAS_UPLOADS_DIR={temp_dir / 'uploads'}\n"
        )

        config = PromptCanvasConfig(_env_file=str(env_file))

        assert config.azure_endpoint == "https://example.openai.azure.com/"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"history_capacity": 0},
            {"provider_timeout": 0},
            {"server_port": 80},
        ],
    )
    def test_invalid_values_rejected(self, temp_dir, overrides):
        """Out-of-range values should fail validation."""
        with pytest.raises(ValidationError):
            PromptCanvasConfig(_env_file=None, uploads_dir=str(temp_dir / "u"), **overrides)
