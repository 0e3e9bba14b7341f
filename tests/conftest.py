"""Shared test fixtures for the ID card OCR test suite."""

import base64
import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

CARD_TEXT = (
    "PAKISTAN NATIONAL IDENTITY CARD\n"
    "HAIDER ABBAS\n"
    "S/O MUHAMMAD ASLAM\n"
    "34104-7441992-1"
)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.full((200, 300), 220, dtype=np.uint8)
    image[97:103, 40:260] = 30
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB card-like test image."""
    image = np.full((240, 380, 3), (210, 230, 215), dtype=np.uint8)
    image[100:120, 40:300] = (20, 30, 25)
    return image


@pytest.fixture
def png_bytes(sample_color_image: np.ndarray) -> bytes:
    """Encode the sample color image as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(sample_color_image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def data_url(png_bytes: bytes) -> str:
    """Encode the sample color image as a browser-style data URL."""
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def card_text() -> str:
    """OCR text of a typical Pakistani identity card."""
    return CARD_TEXT


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
