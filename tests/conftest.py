"""Shared pytest fixtures for Prompt Canvas tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from promptcanvas.api.main import create_app
from promptcanvas.core.config import PromptCanvasConfig
from promptcanvas.core.provider import ImageProvider, InlineImage
from promptcanvas.core.storage import ImageStore


class FakeProvider(ImageProvider):
    """In-memory provider returning canned items or raising a canned error.

    By default every call returns ``n`` inline PNG images.  Set ``items`` to
    return a fixed list instead, or ``error`` to raise it.
    """

    display_name = "Fake Provider"

    def __init__(self, image_bytes: bytes):
        self.image_bytes = image_bytes
        self.items = None
        self.error = None
        self.calls: list[tuple] = []
        self.closed = False

    def generate(self, prompt, size, quality, n):
        self.calls.append((prompt, size, quality, n))
        if self.error is not None:
            raise self.error
        if self.items is not None:
            return list(self.items)
        return [InlineImage(data=self.image_bytes) for _ in range(n)]

    def close(self):
        self.closed = True


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    """Encode a small solid-colour image in the given Pillow format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, "red").save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def uploads_dir(temp_dir: Path) -> Path:
    """Content directory inside the temporary directory."""
    path = temp_dir / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def test_config(uploads_dir: Path) -> PromptCanvasConfig:
    """Create a test configuration pointing at the temporary content directory.

    Args:
        uploads_dir: Content directory from fixture

    Returns:
        PromptCanvasConfig instance for testing
    """
    return PromptCanvasConfig(
        _env_file=None,
        api_key="test-key",
        uploads_dir=str(uploads_dir),
        placeholder_fallback=True,
        history_capacity=50,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """An 8x8 PNG image."""
    return make_image_bytes("PNG")


@pytest.fixture
def make_image():
    """Factory encoding a small image in a given format and size."""
    return make_image_bytes


@pytest.fixture
def fake_provider(png_bytes: bytes) -> FakeProvider:
    """Provider returning inline PNG images."""
    return FakeProvider(png_bytes)


@pytest.fixture
def image_store(uploads_dir: Path) -> ImageStore:
    """Image store writing to the temporary content directory."""
    return ImageStore(uploads_dir)


@pytest.fixture
def test_client(test_config: PromptCanvasConfig, fake_provider: FakeProvider) -> TestClient:
    """FastAPI test client for an app wired to the fake provider."""
    app = create_app(test_config, fake_provider)
    return TestClient(app)
