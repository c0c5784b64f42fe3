"""Generation request orchestration.

:class:`GenerationOrchestrator` is the single path from an inbound request to
a response:

1. Validate the request against the supported sizes, qualities, and image
   count.
2. Call the provider.
3. Pass every returned item through :class:`~promptcanvas.core.storage.ImageStore`.

Provider failures are split in two groups.  Invalid credentials, exhausted
quota, and content-policy rejections are re-raised so the API answers with
401, 429, and 400 respectively.  Every other failure, timeouts included, is
answered with placeholder images and a ``warning`` when
``placeholder_fallback`` is enabled, or re-raised as a 502 when it is not.
"""

from __future__ import annotations

import logging

from promptcanvas.core.config import PromptCanvasConfig
from promptcanvas.core.errors import (
    ContentPolicyError,
    GenerationValidationError,
    ProviderAuthError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderQuotaError,
)
from promptcanvas.core.models import (
    MAX_IMAGES,
    MIN_IMAGES,
    SUPPORTED_QUALITIES,
    SUPPORTED_SIZES,
    GeneratedImage,
    GenerationRequest,
    GenerationResult,
)
from promptcanvas.core.provider import ImageProvider, RemoteImage
from promptcanvas.core.storage import ImageStore, new_request_stamp

logger = logging.getLogger(__name__)

CONNECTION_TEST_PROMPT = "A simple red circle on white background"

_CLASSIFIED_ERRORS = (ProviderAuthError, ProviderQuotaError, ContentPolicyError)


def validate_request(request: GenerationRequest) -> None:
    """Check a request against the supported domains.

    Raises:
        GenerationValidationError: With a message naming the first violated
            field.
    """
    if not request.prompt or not request.prompt.strip():
        raise GenerationValidationError("Prompt is required")

    if request.size not in SUPPORTED_SIZES:
        raise GenerationValidationError(
            "Invalid size. Must be one of: " + ", ".join(SUPPORTED_SIZES)
        )

    if request.quality not in SUPPORTED_QUALITIES:
        raise GenerationValidationError(
            "Invalid quality. Must be one of: " + ", ".join(SUPPORTED_QUALITIES)
        )

    if request.n < MIN_IMAGES or request.n > MAX_IMAGES:
        raise GenerationValidationError(
            f"Invalid n. Number of images must be between {MIN_IMAGES} and {MAX_IMAGES}"
        )


class GenerationOrchestrator:
    """Validates requests, calls the provider, and stores the results.

    Args:
        provider: Configured provider, or ``None`` when no credentials exist.
        store: Image persistence writer.
        settings: Application configuration (fallback behaviour).
    """

    def __init__(
        self,
        provider: ImageProvider | None,
        store: ImageStore,
        settings: PromptCanvasConfig,
    ):
        self.provider = provider
        self.store = store
        self.settings = settings

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run a generation request end to end.

        Args:
            request: Inbound request body.

        Returns:
            The generated (or placeholder) images and echoed settings.

        Raises:
            GenerationValidationError: Invalid request fields.
            ProviderNotConfiguredError: No provider credentials.
            ProviderAuthError: Provider rejected the API key.
            ProviderQuotaError: Provider quota exhausted.
            ContentPolicyError: Prompt rejected by the provider.
            ProviderError: Any other provider failure while the placeholder
                fallback is disabled.
        """
        validate_request(request)

        if self.provider is None:
            raise ProviderNotConfiguredError("Image provider is not configured")

        try:
            items = self.provider.generate(request.prompt, request.size, request.quality, request.n)
        except _CLASSIFIED_ERRORS as e:
            logger.error(f"{self.provider.display_name} rejected the request: {e.message}")
            raise
        except Exception as e:
            logger.error(f"Error generating image: {e}", exc_info=True)
            if not self.settings.placeholder_fallback:
                if isinstance(e, ProviderError):
                    raise
                raise ProviderError(f"Image generation failed: {e}") from e
            return self._placeholders(request, e)

        stamp = new_request_stamp()
        images = [
            self.store.save(item, request, f"img_{stamp}_{index}")
            for index, item in enumerate(items)
        ]
        logger.info(f"{self.provider.display_name} generation successful ({len(images)} image(s))")

        return GenerationResult(
            images=images,
            original_prompt=request.prompt,
            source=self.provider.display_name,
            settings=request.settings(),
        )

    def _placeholders(self, request: GenerationRequest, error: Exception) -> GenerationResult:
        """Build ``n`` placeholder images describing a failed generation."""
        logger.warning("Falling back to placeholder images")

        width, height = request.size.split("x")
        stamp = new_request_stamp()
        images = []
        for index in range(request.n):
            image_id = f"mock_{stamp}_{index}"
            url = self.settings.placeholder_url_template.format(
                width=width, height=height, image_id=image_id
            )
            images.append(
                GeneratedImage(
                    id=image_id,
                    url=url,
                    revised_prompt=f"Mock image for: {request.prompt}",
                    storage="remote",
                )
            )

        message = error.message if isinstance(error, ProviderError) else str(error)
        return GenerationResult(
            images=images,
            original_prompt=request.prompt,
            source=f"Mock Images ({self.provider.display_name} failed)",
            settings=request.settings(),
            warning=f"Image generation failed: {message}",
        )

    def check_connection(self) -> dict:
        """Run a single small generation to verify provider access.

        Returns:
            ``provider`` (display name) and ``testImage``: the returned URL,
            or a note that base64 data was received.

        Raises:
            ProviderNotConfiguredError: No provider credentials.
            ProviderError: The test generation failed, whatever the cause.
        """
        if self.provider is None:
            raise ProviderNotConfiguredError("Image provider is not configured")

        try:
            items = self.provider.generate(CONNECTION_TEST_PROMPT, SUPPORTED_SIZES[0], "medium", 1)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(str(e)) from e

        test_image = "No image data"
        if items:
            if isinstance(items[0], RemoteImage):
                test_image = items[0].url
            else:
                test_image = "Base64 data received"

        return {"provider": self.provider.display_name, "testImage": test_image}
