"""Upstream image-generation provider.

The provider is the only component that talks to the network.  It hides the
two response shapes the image API can produce behind a small tagged union:

- :class:`RemoteImage` when the API returns a hosted URL (public OpenAI
  ``dall-e`` style responses);
- :class:`InlineImage` when it returns base64 bytes (Azure OpenAI and the
  ``gpt-image`` models).

Provider failures are classified into the error taxonomy of
:mod:`promptcanvas.core.errors` so that the orchestrator can decide between a
specific client error and the placeholder fallback.

Usage
-----
::

    from promptcanvas.core.config import config
    from promptcanvas.core.provider import build_provider

    provider = build_provider(config)
    items = provider.generate("a red circle", "1024x1024", "medium", 2)
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

import openai

from promptcanvas.core.config import PromptCanvasConfig
from promptcanvas.core.errors import (
    ContentPolicyError,
    ProviderAuthError,
    ProviderError,
    ProviderQuotaError,
)

logger = logging.getLogger(__name__)

# Error codes reported in the provider's error body.
_AUTH_CODES = {"invalid_api_key"}
_QUOTA_CODES = {"insufficient_quota", "rate_limit_exceeded"}
_POLICY_CODES = {"content_policy_violation", "moderation_blocked", "content_filter"}


@dataclass(frozen=True)
class RemoteImage:
    """An image hosted by the provider."""

    url: str
    revised_prompt: str | None = None


@dataclass(frozen=True)
class InlineImage:
    """An image returned as raw bytes (decoded from base64)."""

    data: bytes
    revised_prompt: str | None = None


ProviderImageItem = RemoteImage | InlineImage


class ImageProvider:
    """Interface for image-generation backends.

    Subclasses implement :meth:`generate` and raise the classified
    :class:`~promptcanvas.core.errors.ProviderError` subclasses on failure.
    """

    display_name: str = "Image provider"

    def generate(self, prompt: str, size: str, quality: str, n: int) -> list[ProviderImageItem]:
        raise NotImplementedError

    def close(self) -> None:
        """Release network resources.  The default implementation does nothing."""


class OpenAIImageProvider(ImageProvider):
    """Image provider backed by the ``openai`` SDK.

    Uses :class:`openai.AzureOpenAI` when an Azure endpoint is configured and
    :class:`openai.OpenAI` otherwise.  Retries are disabled and every call is
    bounded by ``provider_timeout``; a timeout surfaces as a plain
    :class:`ProviderError`.

    Args:
        settings: Application configuration.
        client: Pre-built SDK client (used by tests).
    """

    def __init__(self, settings: PromptCanvasConfig, client=None):
        self.settings = settings

        if settings.azure_endpoint:
            self.display_name = "Azure OpenAI"
            self.model = settings.azure_deployment
        else:
            self.display_name = "OpenAI"
            self.model = settings.image_model

        self._client = client if client is not None else self._build_client(settings)
        logger.info(f"{self.display_name} image client initialised (model: {self.model})")

    @staticmethod
    def _build_client(settings: PromptCanvasConfig):
        if settings.azure_endpoint:
            return openai.AzureOpenAI(
                api_key=settings.api_key,
                azure_endpoint=settings.azure_endpoint,
                azure_deployment=settings.azure_deployment,
                api_version=settings.azure_api_version,
                timeout=settings.provider_timeout,
                max_retries=0,
            )
        return openai.OpenAI(
            api_key=settings.api_key,
            timeout=settings.provider_timeout,
            max_retries=0,
        )

    def generate(self, prompt: str, size: str, quality: str, n: int) -> list[ProviderImageItem]:
        """Request *n* images and convert the response into tagged items.

        Raises:
            ProviderAuthError: Invalid credentials.
            ProviderQuotaError: Rate limit or quota exhausted.
            ContentPolicyError: Prompt rejected by the content filter.
            ProviderError: Any other SDK failure, including timeouts and
                responses that carry neither a URL nor image data.
        """
        logger.info(f"Generating {n} image(s) with {self.display_name} for prompt: {prompt!r}")

        try:
            response = self._client.images.generate(
                model=self.model,
                prompt=prompt,
                size=size,
                quality=quality,
                n=n,
            )
        except openai.OpenAIError as e:
            raise self.classify_error(e) from e

        return [self._to_item(image) for image in response.data or []]

    def _to_item(self, image) -> ProviderImageItem:
        revised_prompt = getattr(image, "revised_prompt", None)

        if getattr(image, "url", None):
            return RemoteImage(url=image.url, revised_prompt=revised_prompt)

        if getattr(image, "b64_json", None):
            try:
                data = base64.b64decode(image.b64_json)
            except (binascii.Error, ValueError) as e:
                raise ProviderError(f"{self.display_name} returned invalid image data") from e
            return InlineImage(data=data, revised_prompt=revised_prompt)

        raise ProviderError(f"{self.display_name} returned an image without data")

    def classify_error(self, error: Exception) -> ProviderError:
        """Map an SDK exception onto the application's error taxonomy."""
        code = getattr(error, "code", None)

        if isinstance(error, openai.AuthenticationError) or code in _AUTH_CODES:
            return ProviderAuthError(f"Invalid {self.display_name} API key")

        if isinstance(error, openai.RateLimitError) or code in _QUOTA_CODES:
            return ProviderQuotaError(f"{self.display_name} API quota exceeded")

        if code in _POLICY_CODES:
            return ContentPolicyError("Content policy violation. Please modify your prompt.")

        if isinstance(error, openai.APITimeoutError):
            return ProviderError(
                f"{self.display_name} request timed out after {self.settings.provider_timeout}s"
            )

        return ProviderError(str(error))

    def close(self) -> None:
        self._client.close()


def build_provider(settings: PromptCanvasConfig) -> ImageProvider | None:
    """Create the configured provider, or ``None`` when no API key is set."""
    if not settings.api_key:
        logger.warning("No image provider API key configured")
        return None
    return OpenAIImageProvider(settings)
