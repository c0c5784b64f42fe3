"""Prompt Canvas - prompt-to-image web API with an on-disk gallery."""

__version__ = "0.1.0"

from promptcanvas.core.config import PromptCanvasConfig, config

__all__ = [
    "PromptCanvasConfig",
    "config",
]
