"""Configuration management for Prompt Canvas.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTCANVAS_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTCANVAS_* prefix)
2. .env file in the project root
3. Default values defined in PromptCanvasConfig

Example .env file:
    PROMPTCANVAS_API_KEY=...
    PROMPTCANVAS_AZURE_ENDPOINT=https://my-resource.openai.azure.com/
    PROMPTCANVAS_AZURE_DEPLOYMENT=gpt-image-1
    PROMPTCANVAS_UPLOADS_DIR=uploads
    PROMPTCANVAS_PLACEHOLDER_FALLBACK=false

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The FastAPI application factory uses it unless a custom instance is passed,
which is how the tests point the content directory at a temporary folder.

Usage Example
-------------
    from promptcanvas.core.config import config

    print(config.uploads_dir)
    print(config.provider_timeout)

Provider Selection
------------------
- When ``azure_endpoint`` is set, requests go to that Azure OpenAI resource
  and ``azure_deployment`` names the image deployment.
- Otherwise the public OpenAI API is used with ``image_model``.
- Without ``api_key`` no provider is built and generation requests fail with
  a "not configured" error.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PromptCanvasConfig(BaseSettings):
    """Main configuration for Prompt Canvas.

    Attributes
    ----------
    Provider Settings:
        api_key : str | None
            API key for OpenAI or Azure OpenAI
        azure_endpoint : str | None
            Azure OpenAI resource endpoint; enables the Azure client
        azure_deployment : str
            Azure deployment name of the image model
        azure_api_version : str
            Azure OpenAI REST API version
        image_model : str
            Model name used against the public OpenAI API
        provider_timeout : float
            Upper bound in seconds for a single provider call

    Fallback Settings:
        placeholder_fallback : bool
            Substitute placeholder images when the provider fails for an
            unclassified reason instead of returning an error
        placeholder_url_template : str
            Format string for placeholder URLs ({width}, {height}, {image_id})

    Storage & History:
        uploads_dir : Path
            Content directory for generated images and metadata sidecars
        public_base_url : str
            Prefix for locally stored image URLs (empty = relative URLs)
        history_capacity : int
            Number of history entries kept in memory

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port
        cors_allow_origins : list[str]
            Origins allowed by the CORS middleware
        log_level : str
            Root logging level used by the CLI entry point
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTCANVAS_",
        case_sensitive=False,
    )

    # Provider settings
    api_key: str | None = Field(
        default=None,
        description="API key for OpenAI or Azure OpenAI",
    )
    azure_endpoint: str | None = Field(
        default=None,
        description="Azure OpenAI endpoint (e.g. https://my-resource.openai.azure.com/)",
    )
    azure_deployment: str = Field(
        default="gpt-image-1",
        description="Azure deployment name of the image model",
    )
    azure_api_version: str = Field(
        default="2025-04-01-preview",
        description="Azure OpenAI API version",
    )
    image_model: str = Field(
        default="gpt-image-1",
        description="Model name for the public OpenAI API",
    )
    provider_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for a single provider call",
        gt=0,
        le=600,
    )

    # Fallback settings
    placeholder_fallback: bool = Field(
        default=True,
        description="Return placeholder images on unclassified provider failures",
    )
    placeholder_url_template: str = Field(
        default="https://picsum.photos/{width}/{height}?random={image_id}",
        description="Placeholder image URL template",
    )

    # Storage & history
    uploads_dir: Path = Field(
        default=Path("uploads"),
        description="Directory for generated images and metadata sidecars",
    )
    public_base_url: str = Field(
        default="",
        description="Prefix for local image URLs (e.g. http://localhost:3001)",
    )
    history_capacity: int = Field(
        default=50,
        description="Maximum number of history entries kept in memory",
        ge=1,
        le=10_000,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3001,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level for the CLI entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the content directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (PROMPTCANVAS_* prefix) and .env file.
config = PromptCanvasConfig()
