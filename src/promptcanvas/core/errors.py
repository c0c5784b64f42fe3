"""Error taxonomy for Prompt Canvas.

Every error carries a user-facing ``message`` and the HTTP ``status_code``
the API layer answers with.  Two of them never reach a client:

- :class:`PersistenceError` is recovered by the image store, which degrades
  to an inline ``data:`` URI.
- :class:`MetadataParseError` is recovered by the gallery, which treats the
  sidecar as absent.
"""

from __future__ import annotations


class PromptCanvasError(Exception):
    """Base class for all application errors.

    The message is intended to be displayed directly to the user.
    """

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GenerationValidationError(PromptCanvasError):
    """A generation request field is empty or outside its allowed domain."""

    status_code = 400


class ProviderError(PromptCanvasError):
    """The image provider failed for a reason with no specific handling."""

    status_code = 502


class ProviderAuthError(ProviderError):
    """The provider rejected the configured credentials."""

    status_code = 401


class ProviderQuotaError(ProviderError):
    """The provider rate limit or quota is exhausted."""

    status_code = 429


class ContentPolicyError(ProviderError):
    """The provider refused the prompt under its content policy."""

    status_code = 400


class ProviderNotConfiguredError(PromptCanvasError):
    """No provider credentials are configured."""

    status_code = 500


class PersistenceError(PromptCanvasError):
    """Writing an image or its sidecar to the content directory failed."""


class MetadataParseError(PromptCanvasError):
    """A metadata sidecar is not valid JSON or lacks required fields."""
