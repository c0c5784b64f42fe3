"""Core functionality for Prompt Canvas.

The core package holds everything that does not depend on the HTTP layer:

- **config.py**: environment-based settings using Pydantic Settings
  (``PROMPTCANVAS_`` prefix).
- **errors.py**: the error taxonomy shared by the orchestrator and the API.
- **metadata.py**: the JSON sidecar codec written next to each saved image.
- **provider.py**: the upstream image-generation capability (OpenAI / Azure
  OpenAI) and its tagged response items.
- **storage.py**: the image persistence writer for the content directory.
- **history.py**: the bounded, thread-safe generation history.
- **orchestrator.py**: validation, provider invocation, persistence dispatch,
  and placeholder fallback.
"""

from promptcanvas.core.config import PromptCanvasConfig, config
from promptcanvas.core.history import HistoryLedger
from promptcanvas.core.orchestrator import GenerationOrchestrator
from promptcanvas.core.storage import ImageStore

__all__ = [
    "GenerationOrchestrator",
    "HistoryLedger",
    "ImageStore",
    "PromptCanvasConfig",
    "config",
]
