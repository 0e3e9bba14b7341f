"""Decoding and encoding of captured ID card images.

Browser captures arrive as data URLs or bare base64 strings, uploads as
raw bytes. Everything is decoded to an RGB numpy array.
"""

import base64
import binascii
import io

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.utils.logger import get_logger

logger = get_logger(__name__)


class ImageDecodeError(ValueError):
    """Raised when an image payload cannot be decoded."""


def _strip_data_url(data: str) -> str:
    """Remove a ``data:image/...;base64,`` prefix if present."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def decode_image(data: str | bytes) -> np.ndarray:
    """Decode an image payload into an RGB array.

    Args:
        data: Data URL, bare base64 text, or raw image bytes.

    Returns:
        Image as an ``(height, width, 3)`` uint8 array in RGB order.

    Raises:
        ImageDecodeError: If the payload is not valid base64 or not an image.
    """
    if isinstance(data, str):
        payload = _strip_data_url(data.strip())
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageDecodeError(f"Invalid base64 image data: {exc}") from exc
    else:
        raw = data

    if not raw:
        raise ImageDecodeError("Empty image payload")

    try:
        with Image.open(io.BytesIO(raw)) as img:
            rgb = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Unable to decode image: {exc}") from exc

    image = np.array(rgb)
    logger.debug("Decoded image %dx%d", image.shape[1], image.shape[0])
    return image


def encode_png(image: np.ndarray) -> str:
    """Encode an image array as base64 PNG text (no data-URL prefix)."""
    buf = io.BytesIO()
    Image.fromarray(image).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")
